from enum import Enum


class TimeUnit(Enum):
    """Time units with their length in nanoseconds."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 3600 * 1_000_000_000
    DAYS = 86400 * 1_000_000_000

    def convert(self, nanos: int) -> int:
        """Convert a nanosecond count into this unit, truncating toward zero."""
        if nanos < 0:
            return -(-nanos // self.value)
        return nanos // self.value

    def to_seconds(self, amount: int) -> float:
        return amount * self.value / 1_000_000_000

    @classmethod
    def parse(cls, value) -> "TimeUnit":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"unknown time unit: {value!r}") from None
