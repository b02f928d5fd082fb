import io
from types import SimpleNamespace
from typing import Any

import msgspec
import pytest
from helpers import Owner, Record, Zone

from jsonbind import (
    DecodeError,
    EncodeError,
    JsonDecoder,
    JsonEncoder,
    MapperConfig,
    Module,
    ObjectMapper,
    Response,
    TypeRef,
)

##
## encoder
##


def test_encodes_map_numerical_values_as_integer(template):
    JsonEncoder().encode({'foo': 1}, dict, template)

    assert template.body_text == '{\n  "foo" : 1\n}'


def test_encodes_form_params(template):
    form = {'foo': 1, 'bar': [2, 3]}
    JsonEncoder().encode(form, dict[str, Any], template)

    assert template.body_text == '{\n  "foo" : 1,\n  "bar" : [ 2, 3 ]\n}'


def test_encode_omits_none_fields(template):
    JsonEncoder().encode(Record('a', tags=['x'], owner=Owner('bob')), Record, template)

    assert template.body_text == (
        '{\n'
        '  "name" : "a",\n'
        '  "tags" : [ "x" ],\n'
        '  "owner" : {\n'
        '    "name" : "bob"\n'
        '  },\n'
        '  "counts" : { }\n'
        '}'
    )


def test_custom_encoder(template, upper_module):
    encoder = JsonEncoder([upper_module])
    zones = [Zone('denominator.io.'), Zone('denominator.io.', 'abcd')]

    encoder.encode(zones, list[Zone], template)

    assert template.body_text == (
        '[ {\n'
        '  "name" : "DENOMINATOR.IO."\n'
        '}, {\n'
        '  "name" : "DENOMINATOR.IO.",\n'
        '  "id" : "ABCD"\n'
        '} ]'
    )


def test_encoder_with_prebuilt_mapper(template):
    mapper = ObjectMapper(MapperConfig(omit_none=False, indent=None))
    JsonEncoder(mapper=mapper).encode(Owner('bob'), Owner, template)

    assert template.body_text == '{"name":"bob","email":null}'


def test_encoder_rejects_mapper_with_modules(upper_module):
    with pytest.raises(ValueError):
        JsonEncoder([upper_module], mapper=ObjectMapper())


def test_encode_error_leaves_template_untouched(template):
    class Opaque:
        pass

    with pytest.raises(EncodeError) as exc_info:
        JsonEncoder().encode({'ok': 1, 'bad': Opaque()}, dict, template)

    assert 'Opaque' in str(exc_info.value)
    assert exc_info.value.__cause__ is not None
    assert template.body_bytes is None
    assert 'Content-Length' not in template.headers


def test_encode_sets_content_length(template):
    JsonEncoder().encode(['é'], list[str], template)

    assert template.body_bytes == '[ "é" ]'.encode()
    assert template.headers['Content-Length'] == str(len(template.body_bytes))


##
## decoder
##


def test_decodes(zones, zones_json):
    response = Response.create(200, 'OK', {}, zones_json)
    decoded = JsonDecoder().decode(response, list[Zone])

    assert decoded == zones
    assert all(type(zone) is Zone for zone in decoded)


def test_decodes_type_ref(zones, zones_json):
    response = Response.create(200, 'OK', {}, zones_json)

    assert JsonDecoder().decode(response, TypeRef[list[Zone]]) == zones
    assert JsonDecoder().decode(response, TypeRef(list[Zone])) == zones


def test_untyped_list_decodes_to_dicts(zones_json):
    response = Response.create(200, 'OK', {}, zones_json)
    decoded = JsonDecoder().decode(response, list)

    assert all(type(zone) is dict for zone in decoded)


def test_null_body_decodes_to_none():
    response = Response.create(204, 'OK', {}, None)

    assert JsonDecoder().decode(response, str) is None


def test_empty_body_decodes_to_none():
    response = Response.create(204, 'OK', {}, b'')

    assert JsonDecoder().decode(response, str) is None


def test_empty_body_decodes_to_empty_bytes():
    response = Response.create(204, 'OK', {}, b'')

    assert JsonDecoder().decode(response, bytes) == b''
    assert JsonDecoder().decode(response, bytearray) == bytearray()


def test_not_found_decodes_to_empty():
    response = Response.create(404, 'NOT FOUND', {}, None)

    assert JsonDecoder().decode(response, bytes) == b''
    assert JsonDecoder().decode(response, dict[str, Zone]) == {}
    assert JsonDecoder().decode(response, set[int]) == set()


def test_empty_body_keeps_collections_none():
    response = Response.create(204, 'No Content', {}, b'')

    assert JsonDecoder().decode(response, list[Zone]) is None


def test_not_found_ignores_error_body():
    response = Response.create(404, 'NOT FOUND', {}, '<html>missing</html>')

    assert JsonDecoder().decode(response, list[Zone]) == []
    assert JsonDecoder().decode(response, Record) is None


def test_custom_decoder(zones_json, upper_module):
    decoder = JsonDecoder([upper_module])
    response = Response.create(200, 'OK', {}, zones_json)

    assert decoder.decode(response, list[Zone]) == [
        Zone('DENOMINATOR.IO.'),
        Zone('DENOMINATOR.IO.', 'ABCD'),
    ]


def test_decode_stream_body():
    body = io.BytesIO(b'{"name": "a", "tags": ["x", "y"]}')
    response = SimpleNamespace(status=200, body=body)

    assert JsonDecoder().decode(response, Record) == Record('a', ['x', 'y'])
    assert body.closed


def test_decode_malformed_json():
    response = Response.create(200, 'OK', {}, '[{"name": ')

    with pytest.raises(DecodeError) as exc_info:
        JsonDecoder().decode(response, list[Zone])
    assert isinstance(exc_info.value.__cause__, msgspec.DecodeError)


def test_decode_type_mismatch():
    response = Response.create(200, 'OK', {}, '["a", "b"]')

    with pytest.raises(DecodeError):
        JsonDecoder().decode(response, list[int])


def test_decode_read_error():
    class Broken:
        def read(self):
            raise OSError('connection reset')

    with pytest.raises(DecodeError, match='connection reset'):
        JsonDecoder().decode(SimpleNamespace(status=200, body=Broken()), Any)


def test_decode_closed_stream():
    body = io.BytesIO(b'{"name": "a"}')
    body.close()

    with pytest.raises(DecodeError, match='error reading body') as exc_info:
        JsonDecoder().decode(SimpleNamespace(status=200, body=body), Record)
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_decode_unreadable_body():
    with pytest.raises(DecodeError, match='unreadable body: int'):
        JsonDecoder().decode(SimpleNamespace(status=200, body=42), Any)


def test_decoder_modules_last_registered_wins(zones_json):
    first = Module('first').add_deserializer(Zone, lambda raw: Zone('first'))
    second = Module('second').add_deserializer(Zone, lambda raw: Zone('second'))
    response = Response.create(200, 'OK', {}, zones_json)

    decoded = JsonDecoder([first, second]).decode(response, list[Zone])

    assert decoded == [Zone('second'), Zone('second')]


##
## round trip
##


@pytest.mark.parametrize(
    'value, body_type',
    [
        ({'foo': 1, 'bar': [2, 3], 'baz': {'qux': 'x'}}, dict[str, Any]),
        (Record('a', ['x'], Owner('bob', 'bob@example.com'), {'n': 1}), Record),
        ([Zone('a.'), Zone('b.', 'B')], list[Zone]),
    ],
)
def test_round_trip(value, body_type, template):
    JsonEncoder().encode(value, body_type, template)
    response = Response.create(200, 'OK', {}, template.body_bytes)

    assert JsonDecoder().decode(response, body_type) == value
