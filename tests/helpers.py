import msgspec


class Zone(dict):
    def __init__(self, name=None, id=None):
        super().__init__()
        if name is not None:
            self['name'] = name
        if id is not None:
            self['id'] = id


def serialize_zone(zone):
    return {key: str(value).upper() for key, value in zone.items()}


def deserialize_zone(raw):
    zone = Zone()
    for key, value in raw.items():
        if value is not None:
            zone[key] = str(value).upper()
    return zone


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def __eq__(self, other):
        return isinstance(other, Point) and (self.x, self.y) == (other.x, other.y)

    def __repr__(self):
        return f'Point({self.x}, {self.y})'


class Shape(msgspec.Struct):
    name: str
    points: list[Point]


class Owner(msgspec.Struct):
    name: str
    email: str | None = None


class Record(msgspec.Struct):
    name: str
    tags: list[str] = msgspec.field(default_factory=list)
    owner: Owner | None = None
    counts: dict[str, int] = msgspec.field(default_factory=dict)
