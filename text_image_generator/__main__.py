import fire

from text_image_generator.run_generate import run


def main():
    """The main entry point for the command-line interface.

    It uses the `fire` library to expose the `run` function from
    `text_image_generator.run_generate` to the command line.
    """
    fire.Fire(run)


if __name__ == "__main__":
    main()
