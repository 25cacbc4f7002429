"""Generates a package of synthetic text images from rendered text rasters.

Every image in the input directory is treated as rendered text (dark ink on a
light background). Each one is turned into one or more synthetic samples by a
`Generator`, in a thread pool, and the results are written to
`OUTPUT_DIR/img` together with an `OUTPUT_DIR/meta.csv` metadata file.

Example:
    python -m text_image_generator rendered/ out/ --samples_per_image=4 --seed=0
"""

from functools import partial
from pathlib import Path

import cv2
import fire
import numpy as np
import pandas as pd
from loguru import logger
from tqdm.contrib.concurrent import thread_map

from text_image_generator.config import CONFIG_PATH, OutputConfig, load_config
from text_image_generator.exceptions import SingularTransform
from text_image_generator.generator import Generator
from text_image_generator.utils import list_image_files

META_COLUMNS = ["source", "id", "path", "height", "width"]


def worker_fn(args, generator, out_dir, debug=False):
    """Generates and saves a single sample.

    Args:
        args (tuple): The index, source image path, sample ID and the
            `np.random.SeedSequence` of the sample.
        generator (Generator): The shared generator.
        out_dir (Path): The directory the image is written to.
        debug (bool, optional): If True, logs every processed sample.

    Returns:
        tuple or None: `(source, id, path, height, width)` of the written
        image, or None if the sample was skipped.
    """
    i, source, id_, seed_seq = args
    if debug:
        logger.debug(f"Processing sample {i} ({id_}) from {source}")

    text_image = cv2.imread(str(source), cv2.IMREAD_GRAYSCALE)
    if text_image is None:
        logger.warning(f"Skipping unreadable image {source}")
        return None

    try:
        img = generator.process(text_image, rng=np.random.default_rng(seed_seq))
    except SingularTransform as e:
        logger.warning(f"Skipping sample {id_}: {e}")
        return None

    img_path = Path(out_dir) / f"{id_}.png"
    cv2.imwrite(str(img_path), img)
    if debug:
        logger.debug(f"Saved image to {img_path}")

    return str(source), id_, str(img_path), img.shape[0], img.shape[1]


def run(
    input_dir,
    output_dir,
    config_path=None,
    samples_per_image=1,
    max_workers=4,
    seed=None,
    target_size=None,
    debug=False,
):
    """Generates synthetic samples for every rendered text image of a directory.

    Args:
        input_dir (str): The directory containing rendered text images.
        output_dir (str): The directory receiving `img/` and `meta.csv`.
        config_path (str, optional): The YAML configuration. Defaults to the
            configuration shipped with the package.
        samples_per_image (int, optional): The number of samples generated
            from each input image. Defaults to 1.
        max_workers (int, optional): The number of worker threads. Defaults
            to 4.
        seed (int, optional): Seed making the run reproducible. Defaults to
            None.
        target_size (str, optional): Overrides the output size, formatted as
            "width,height". Defaults to None.
        debug (bool, optional): If True, logs every processed sample.

    Returns:
        pd.DataFrame: The metadata of the generated samples.
    """
    samples_per_image = int(samples_per_image)
    max_workers = int(max_workers)
    if samples_per_image < 1:
        raise ValueError("`samples_per_image` must be at least 1")

    config = load_config(Path(config_path) if config_path else CONFIG_PATH)
    if target_size is not None:
        config = config.model_copy(update={"output": OutputConfig(target_size=target_size)})

    sources = list_image_files(input_dir)
    logger.info(f"Found {len(sources)} rendered images in {input_dir}")

    img_dir = Path(output_dir) / "img"
    img_dir.mkdir(parents=True, exist_ok=True)

    seed_seq = np.random.SeedSequence(None if seed is None else int(seed))
    generator = Generator(config, rng=np.random.default_rng(seed_seq.spawn(1)[0]))

    ids = [(source, f"{source.stem}_{k:04d}") for source in sources for k in range(samples_per_image)]
    args = [(i, source, id_, child) for i, ((source, id_), child) in enumerate(zip(ids, seed_seq.spawn(len(ids))))]

    f_with_generator = partial(worker_fn, generator=generator, out_dir=img_dir, debug=debug)
    results = thread_map(f_with_generator, args, max_workers=max_workers, desc="Generating samples")

    data = pd.DataFrame([res for res in results if res is not None], columns=META_COLUMNS)
    if data.empty:
        logger.warning("No data generated.")

    meta_path = Path(output_dir) / "meta.csv"
    data.to_csv(meta_path, index=False)
    logger.info(f"Wrote {len(data)} samples to {output_dir}")
    return data


if __name__ == "__main__":
    fire.Fire(run)
