"""Configurable random distributions.

Every probability-free magnitude of the pipeline (rotation angles, blur
sigma, background tone jitter, ...) is drawn from a `RandomVariable`: either a
uniform distribution or a Gaussian truncated to a closed interval. The
configuration file describes them as `[min, max, "u"]` or `[min, max, "g"]`.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from text_image_generator.exceptions import InvalidConfiguration

DISTRIBUTION_CODES = {"u": "uniform", "g": "gaussian"}


class RandomVariable(BaseModel):
    """A uniform or truncated-Gaussian distribution over `[low, high]`.

    The Gaussian variant is centered on the middle of the interval with a
    standard deviation of a sixth of its width, and samples falling outside
    the interval are clamped to its bounds.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["uniform", "gaussian"] = Field(..., description="The distribution family.")
    low: float = Field(..., description="The lower bound of the interval.")
    high: float = Field(..., description="The upper bound of the interval.")

    @model_validator(mode="before")
    @classmethod
    def parse_shorthand(cls, data: Any) -> Any:
        """Accepts the `[min, max, "g" | "u"]` shorthand used in YAML files."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise ValueError("a distribution must be given as [min, max, 'g' | 'u']")
            low, high, code = data
            if code not in DISTRIBUTION_CODES:
                raise ValueError("distribution parameter in config file should be `g` or `u`")
            return {"kind": DISTRIBUTION_CODES[code], "low": low, "high": high}
        return data

    @model_validator(mode="after")
    def check_bounds(self) -> "RandomVariable":
        if self.low > self.high:
            raise ValueError(f"lower bound {self.low} is greater than upper bound {self.high}")
        return self

    @classmethod
    def uniform(cls, low, high):
        """Creates a uniform distribution over `[low, high]`."""
        return cls._checked("uniform", low, high)

    @classmethod
    def gaussian(cls, low, high):
        """Creates a Gaussian distribution truncated to `[low, high]`."""
        return cls._checked("gaussian", low, high)

    @classmethod
    def _checked(cls, kind, low, high):
        if low > high:
            raise InvalidConfiguration(f"lower bound {low} is greater than upper bound {high}")
        return cls(kind=kind, low=low, high=high)

    @property
    def mean(self) -> float:
        return (self.low + self.high) / 2.0

    @property
    def sigma(self) -> float:
        return (self.high - self.low) / 6.0

    def sample(self, rng) -> float:
        """Draws one value.

        Args:
            rng (np.random.Generator): The random source to draw from.

        Returns:
            float: A value inside `[low, high]`.
        """
        if self.kind == "uniform":
            if self.low == self.high:
                return self.low
            return float(min(rng.uniform(self.low, self.high), self.high))
        value = rng.normal(self.mean, self.sigma) if self.sigma > 0 else self.mean
        return float(min(max(value, self.low), self.high))
