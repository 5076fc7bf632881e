import pytest

from kvlite.errors import CodecError
from kvlite.storage.codec import ENCRYPTED, PLAIN, Codec, is_encrypted, new_secret
from kvlite.storage.serializer import JSONSerializer


def test_plain_frame_is_flag_plus_serialized_value():
    c = Codec(new_secret(), JSONSerializer())
    assert c.pack({"a": 1}) == bytes([PLAIN]) + b'{"a": 1}'


def test_encrypted_frame_hides_payload():
    c = Codec(new_secret(), JSONSerializer())
    record = c.pack("top secret value", encrypt=True)
    assert record[0] == ENCRYPTED
    assert is_encrypted(record)
    assert b"top secret" not in record
    assert c.unpack(record) == "top secret value"


def test_encryption_uses_fresh_iv():
    c = Codec(new_secret())
    assert c.pack("x", encrypt=True) != c.pack("x", encrypt=True)


def test_other_secret_cannot_read_encrypted_record():
    record = Codec(new_secret(), JSONSerializer()).pack({"key": "value"}, encrypt=True)
    with pytest.raises(CodecError):
        Codec(new_secret(), JSONSerializer()).unpack(record)


def test_decode_empty_is_noop():
    c = Codec(new_secret())
    assert c.decode(b"") is None
    assert c.unpack(b"") is None


def test_malformed_payload_raises_codec_error():
    c = Codec(new_secret(), JSONSerializer())
    with pytest.raises(CodecError):
        c.unpack(bytes([PLAIN]) + b"{not json")
    with pytest.raises(CodecError):
        c.unpack(bytes([7]) + b"{}")
    with pytest.raises(CodecError):
        c.unpack(bytes([ENCRYPTED]) + b"short")


def test_codec_requires_secret():
    with pytest.raises(ValueError):
        Codec(b"")
