from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Table:
    """A physical table of the venue. The catalog is static, see table_registry."""
    id: int
    number: str
    capacity: int
    location: str

    def to_dict(self):
        return asdict(self)
