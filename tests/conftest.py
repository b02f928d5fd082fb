import pytest
from helpers import Zone, deserialize_zone, serialize_zone

import jsonbind

ZONES_JSON = """\
[
  {
    "name": "denominator.io."
  },
  {
    "name": "denominator.io.",
    "id": "ABCD"
  }
]
"""


@pytest.fixture
def zones_json():
    return ZONES_JSON


@pytest.fixture
def zones():
    return [Zone('denominator.io.'), Zone('denominator.io.', 'ABCD')]


@pytest.fixture
def upper_module():
    return (
        jsonbind.Module('UpperZoneModule')
        .add_serializer(Zone, serialize_zone)
        .add_deserializer(Zone, deserialize_zone)
    )


@pytest.fixture
def template():
    return jsonbind.RequestTemplate('POST', '/zones')
