import pytest

from kvlite.storage.serializer import (
    JSONSerializer,
    PickleSerializer,
    YAMLSerializer,
    get_serializer,
)


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def __eq__(self, other):
        return isinstance(other, Point) and (self.x, self.y) == (other.x, other.y)


@pytest.mark.parametrize("serializer", [PickleSerializer(), JSONSerializer(), YAMLSerializer()])
def test_basic_values(serializer):
    value = {"name": "x", "items": [1, 2, 3], "nested": {"ok": True}}
    assert serializer.load(serializer.dump(value)) == value


def test_pickle_handles_arbitrary_objects():
    s = PickleSerializer()
    assert s.load(s.dump(Point(1, 2))) == Point(1, 2)


def test_json_rejects_arbitrary_objects():
    with pytest.raises(TypeError):
        JSONSerializer().dump(Point(1, 2))


def test_get_serializer_by_name_and_instance():
    assert isinstance(get_serializer(), PickleSerializer)
    assert isinstance(get_serializer("JSON"), JSONSerializer)
    assert isinstance(get_serializer("yaml"), YAMLSerializer)
    inst = JSONSerializer()
    assert get_serializer(inst) is inst
    with pytest.raises(ValueError):
        get_serializer("msgpack")
