"""
Named Binary Tag library. Serializes and deserializes TAG_* objects
to and from binary data. Load a schematic's root tag by calling nbt.load().
Create your own TAG_* objects and set their values.
Save a TAG_* object to a file or a BytesIO object, or call save() with no
arguments to get the serialized bytes.

All multi-byte numbers are big-endian. Byte arrays (and int and long arrays)
are stored as numpy arrays.

Official NBT documentation is here:
http://www.minecraft.net/docs/NBT.txt
"""
from collections.abc import MutableMapping, MutableSequence
from io import BytesIO
from logging import getLogger
import struct

from numpy import array, array_equal, dtype, frombuffer, uint8, zeros

from . import schematicbase
from .compression import DEFAULT_COMPRESSION_LEVEL, deflate, inflate
from .schematicbase import CorruptStream, MalformedTag, MissingField

log = getLogger(__name__)
warn, error, info, debug = log.warning, log.error, log.info, log.debug

TAGfmt = ">b"


def _unpack_from(fmt, data, data_cursor):
    size = struct.calcsize(fmt)
    if data_cursor + size > len(data):
        raise MalformedTag("Tag data truncated: needed {0} bytes at offset {1}, only {2} left".format(
            size, data_cursor, len(data) - data_cursor))
    return struct.unpack_from(fmt, data, data_cursor), data_cursor + size


def _take(data, data_cursor, count):
    if count < 0:
        raise MalformedTag("Negative length {0} at offset {1}".format(count, data_cursor))
    end = data_cursor + count
    if end > len(data):
        raise MalformedTag("Declared length {0} at offset {1} runs past the end of the data ({2} bytes)".format(
            count, data_cursor, len(data)))
    return data[data_cursor:end], end


def _checkedString(s):
    """Coerce to str, rejecting strings that do not fit a TAG_String length prefix."""
    if isinstance(s, (bytes, bytearray)):
        s = bytes(s).decode('utf-8', 'surrogateescape')
    else:
        s = str(s)
    if len(s.encode('utf-8', 'surrogateescape')) > 0xFFFF:
        raise ValueError("String of {0} characters is too long for a TAG_String".format(len(s)))
    return s


def _single(self, value):
    """Coerce to the nearest single-precision float. Values out of range are rejected."""
    try:
        return struct.unpack(">f", struct.pack(">f", float(value)))[0]
    except OverflowError as e:
        raise ValueError("{0!r} is out of range for a TAG_Float".format(value)) from e


def _wrapping(bits):
    """Coerce to a signed integer of the given width, wrapping like a C cast."""
    mask = (1 << bits) - 1
    half = 1 << (bits - 1)

    def coerce(self, value):
        value = int(value) & mask
        return value - (mask + 1) if value >= half else value
    return coerce


class TAG_Value(object):
    """Simple values. Subclasses override fmt to change the type and size.
    Subclasses may set dataType instead of overriding setValue for automatic data type coercion"""

    fmt = ">b"
    tag = -1  # error!
    dataType = float

    __hash__ = None

    _value = None

    def getValue(self):
        return self._value

    def setValue(self, newVal):
        self._value = self.dataType(newVal)
    value = property(getValue, setValue, None, "Change the TAG's value.    Data types are checked and coerced if needed.")

    _name = ""

    def getName(self):
        return self._name

    def setName(self, newVal):
        self._name = "" if newVal is None else _checkedString(newVal)

    def delName(self):
        self._name = ""
    name = property(getName, setName, delName, "Change the TAG's name.    Coerced to a string.")

    @classmethod
    def load_from(cls, data, data_cursor):
        (value,), data_cursor = _unpack_from(cls.fmt, data, data_cursor)
        return cls(value=value), data_cursor

    def __init__(self, value=0, name=""):
        self.name = name
        self.value = value

    def __eq__(self, other):
        return (type(self) is type(other)
                and self.name == other.name
                and self._sameValue(other))

    def _sameValue(self, other):
        return self.value == other.value

    def __repr__(self):
        return "%s( \"%s\" ): %s" % (self.__class__.__name__, self.name, repr(self.value))

    def __str__(self):
        return self.pretty_string()

    def pretty_string(self, indent=0):
        if self.name:
            return " " * indent + "%s( \"%s\" ): %s" % (self.__class__.__name__, self.name, self.value)
        else:
            return " " * indent + "%s: %s" % (self.__class__.__name__, self.value)

    def write_tag(self, buf):
        buf.write(struct.pack(TAGfmt, self.tag))

    def write_name(self, buf):
        TAG_String(self.name).write_value(buf)

    def write_value(self, buf):
        buf.write(struct.pack(self.fmt, self.value))

    def save(self, filename="", buf=None, compresslevel=DEFAULT_COMPRESSION_LEVEL):
        """Save the tagged element. With a filename, writes a gzipped file.
        With buf, writes the tag into that file-like object. With neither,
        returns the serialized bytes."""
        if filename:
            self.saveGzipped(filename, compresslevel)
            return
        if buf is None:
            buf = BytesIO()
            self.save(buf=buf)
            return buf.getvalue()

        self.write_tag(buf)
        self.write_name(buf)
        self.write_value(buf)

    def saveGzipped(self, filename, compresslevel=DEFAULT_COMPRESSION_LEVEL):
        schematicbase.filesystem.writeAll(filename, deflate(self.save(), compresslevel))


class TAG_Byte(TAG_Value):
    tag = 1
    fmt = ">b"
    dataType = _wrapping(8)


class TAG_Short(TAG_Value):
    tag = 2
    fmt = ">h"
    dataType = _wrapping(16)


class TAG_Int(TAG_Value):
    tag = 3
    fmt = ">i"
    dataType = _wrapping(32)


class TAG_Long(TAG_Value):
    tag = 4
    fmt = ">q"
    dataType = _wrapping(64)


class TAG_Float(TAG_Value):
    tag = 5
    fmt = ">f"
    dataType = _single


class TAG_Double(TAG_Value):
    tag = 6
    fmt = ">d"
    dataType = float


class TAG_Byte_Array(TAG_Value):
    """Like a string, but for binary data.    four length bytes instead of
    two.    value is a numpy array, and you can change its elements"""

    tag = 7
    arrayType = uint8

    def dataType(self, value):
        return array(value, self.arrayType)

    def __repr__(self):
        return "<%s: length %d> ( %s )" % (self.__class__.__name__, self.value.size, self.name)

    def pretty_string(self, indent=0):
        if self.name:
            return " " * indent + "%s( \"%s\" ): shape=%s dtype=%s %s" % (
                self.__class__.__name__,
                self.name,
                str(self.value.shape),
                str(self.value.dtype),
                self.value)
        else:
            return " " * indent + "%s: %s %s" % (self.__class__.__name__, str(self.value.shape), self.value)

    @classmethod
    def load_from(cls, data, data_cursor):
        (count,), data_cursor = _unpack_from(">i", data, data_cursor)
        if count < 0:
            raise MalformedTag("Negative %s length %d" % (cls.__name__, count))
        raw, data_cursor = _take(data, data_cursor, count * dtype(cls.arrayType).itemsize)
        return cls(frombuffer(raw, cls.arrayType).copy()), data_cursor

    def __init__(self, value=None, name=""):
        if value is None:
            value = zeros(0, self.arrayType)
        self.name = name
        self.value = value

    def _sameValue(self, other):
        return array_equal(self.value, other.value)

    def write_value(self, buf):
        buf.write(struct.pack(">i", self.value.size))
        buf.write(self.value.tobytes())


class TAG_Int_Array(TAG_Byte_Array):
    """An array of ints"""
    tag = 11
    arrayType = ">i4"


class TAG_Long_Array(TAG_Byte_Array):
    """An array of longs"""
    tag = 12
    arrayType = ">i8"


class TAG_String(TAG_Value):
    """String in UTF-8
    The value parameter must be a 'str' or UTF-8 encoded 'bytes'. Bytes that are
    not valid UTF-8 survive a load and save unchanged.
    """

    tag = 8
    fmt = ">H"

    def dataType(self, s):
        return _checkedString(s)

    @classmethod
    def load_from(cls, data, data_cursor):
        (string_len,), data_cursor = _unpack_from(cls.fmt, data, data_cursor)
        value, data_cursor = _take(data, data_cursor, string_len)
        return cls(value), data_cursor

    def __init__(self, value="", name=""):
        self.name = name
        self.value = value

    def write_value(self, buf):
        u8value = self._value.encode('utf-8', 'surrogateescape')
        buf.write(struct.pack(self.fmt, len(u8value)))
        buf.write(u8value)


class TAG_Compound(TAG_Value, MutableMapping):
    """A heterogenous list of named tags. Names must be unique within
    the TAG_Compound. Add tags to the compound using the subscript
    operator [].    This will automatically name the tags."""

    tag = 10

    def dataType(self, val):
        val = list(val)
        names = set()
        for i in val:
            if not isinstance(i, TAG_Value):
                raise TypeError("Invalid type %s for TAG_Compound" % (i.__class__,))
            if i.name in names:
                raise ValueError("Duplicate tag name %r in TAG_Compound" % (i.name,))
            names.add(i.name)
        return val

    def __repr__(self):
        return "%s( %s ): %s" % (self.__class__.__name__, self.name, self.value)

    def pretty_string(self, indent=0):
        if self.name:
            pretty = " " * indent + "%s( \"%s\" ): %d items\n" % (self.__class__.__name__, self.name, len(self.value))
        else:
            pretty = " " * indent + "%s(): %d items\n" % (self.__class__.__name__, len(self.value))
        indent += 4
        for tag in self.value:
            pretty += tag.pretty_string(indent) + "\n"
        return pretty

    @classmethod
    def load_from(cls, data, data_cursor):
        self = cls()
        names = set()
        while True:
            if data_cursor >= len(data):
                raise MalformedTag("Unterminated TAG_Compound")
            tag_type = data[data_cursor]
            data_cursor += 1
            if tag_type == 0:
                break

            tag, data_cursor = load_named(data, data_cursor, tag_type)
            if tag.name in names:
                raise MalformedTag("Duplicate tag name %r in TAG_Compound" % (tag.name,))
            names.add(tag.name)

            self._value.append(tag)

        return self, data_cursor

    def __init__(self, value=(), name=""):
        self.name = name
        self.value = value

    def _sameValue(self, other):
        return self.value == other.value

    def write_value(self, buf):
        for i in self.value:
            i.save(buf=buf)
        buf.write(b"\x00")

    # collection functions
    def __getitem__(self, k):
        for key in self.value:
            if key.name == k:
                return key
        raise KeyError("Key {0} not found in tag {1}".format(k, self.name))

    def __iter__(self):
        return (x.name for x in self.value)

    def __contains__(self, k):
        return any(x.name == k for x in self.value)

    def __len__(self):
        return len(self.value)

    def __setitem__(self, k, v):
        """Automatically wraps lists and tuples in a TAG_List, and wraps strings
        in a TAG_String."""
        if isinstance(v, (list, tuple)):
            v = TAG_List(v)
        elif isinstance(v, str):
            v = TAG_String(v)

        if not (v.__class__ in tag_classes.values()):
            raise TypeError("Invalid type %s for TAG_Compound" % (v.__class__))
        v.name = k
        for i, old in enumerate(self.value):
            if old.name == k:
                self.value[i] = v
                return
        self.value.append(v)

    def __delitem__(self, k):
        self.value.remove(self[k])

    def add(self, v):
        self[v.name] = v

    def require(self, k, tagType=None):
        """Return the tag named k, raising MissingField if it is absent or is
        not exactly of type tagType. A TAG_Int_Array is not a TAG_Byte_Array here."""
        if k not in self:
            raise MissingField("Tag {0} not found in {1}".format(k, self.name or "root tag"))
        tag = self[k]
        if tagType is not None and type(tag) is not tagType:
            raise MissingField("Tag {0} is a {1}, expected {2}".format(k, tag.__class__.__name__, tagType.__name__))
        return tag


class TAG_List(TAG_Value, MutableSequence):

    """A homogenous list of unnamed data of a single TAG_* type.
    Once created, the type can only be changed by emptying the list
    and adding an element of the new type. If created with no arguments,
    returns a list of TAG_Compound

    Empty lists in the wild have been seen with type TAG_Byte and TAG_End (0);
    the declared type of an empty list is kept as loaded."""

    tag = 9

    def dataType(self, val):
        val = list(val)
        if val:
            listType = val[0].__class__
            if not all(x.__class__ is listType for x in val):
                raise TypeError("TAG_List elements must all be %s" % (listType.__name__,))
        for x in val:
            x.name = ""
        return val

    def __repr__(self):
        return "%s( %s ): %s" % (self.__class__.__name__, self.name, self.value)

    def pretty_string(self, indent=0):
        if self.name:
            pretty = " " * indent + "%s( \"%s\" ):\n" % (self.__class__.__name__, self.name)
        else:
            pretty = " " * indent + "%s():\n" % (self.__class__.__name__,)

        indent += 4
        for tag in self.value:
            pretty += tag.pretty_string(indent) + "\n"
        return pretty

    @classmethod
    def load_from(cls, data, data_cursor):
        (list_type, list_length), data_cursor = _unpack_from(">bi", data, data_cursor)
        if list_length < 0:
            raise MalformedTag("Negative TAG_List length %d" % (list_length,))
        if list_length and list_type not in tag_classes:
            raise MalformedTag("Unknown TAG_List element type %d" % (list_type,))

        self = cls()
        self.list_type = list_type
        for i in range(list_length):
            tag, data_cursor = tag_classes[list_type].load_from(data, data_cursor)
            self._value.append(tag)

        return self, data_cursor

    def __init__(self, value=(), name="", list_type=TAG_Compound):
        # can be created from a list of tags in value, with an optional
        # name, or created with list_type taken from a TAG class

        self.name = name
        self.list_type = list_type.tag
        self.value = value
        if len(self.value):
            self.list_type = self.value[0].tag

    def _sameValue(self, other):
        return self.list_type == other.list_type and self.value == other.value

    # collection methods
    def __iter__(self):
        return iter(self.value)

    def __contains__(self, k):
        return k in self.value

    def __getitem__(self, i):
        return self.value[i]

    def __len__(self):
        return len(self.value)

    def __setitem__(self, i, v):
        if v.__class__ is not tag_classes.get(self.list_type):
            raise TypeError("Invalid type %s for TAG_List(%s)" % (v.__class__, tag_classes.get(self.list_type)))
        v.name = ""
        self.value[i] = v

    def __delitem__(self, i):
        del self.value[i]

    def insert(self, i, v):
        if v.tag not in tag_classes:
            raise TypeError("Not a tag type: %s" % (v,))
        if len(self) == 0:
            self.list_type = v.tag
        elif v.__class__ is not tag_classes[self.list_type]:
            raise TypeError("Invalid type %s for TAG_List(%s)" % (v.__class__, tag_classes[self.list_type]))

        v.name = ""
        self.value.insert(i, v)

    def write_value(self, buf):
        buf.write(struct.pack(">bi", self.list_type, len(self)))
        for i in self.value:
            i.write_value(buf)


tag_classes = {
    1: TAG_Byte,
    2: TAG_Short,
    3: TAG_Int,
    4: TAG_Long,
    5: TAG_Float,
    6: TAG_Double,
    7: TAG_Byte_Array,
    8: TAG_String,
    9: TAG_List,
    10: TAG_Compound,
    11: TAG_Int_Array,
    12: TAG_Long_Array,
}


def loadFile(filename):
    inputdata = schematicbase.filesystem.readAll(filename)
    try:
        data = inflate(inputdata)
    except CorruptStream:
        info(u"File {0} not zipped".format(filename))
        data = inputdata

    return load(buf=data)


def load_named(data, data_cursor, tag_type):
    if tag_type not in tag_classes:
        raise MalformedTag("Unknown tag type %d at offset %d" % (tag_type, data_cursor - 1))
    tag_name, data_cursor = TAG_String.load_from(data, data_cursor)
    tag_name = tag_name.value

    tag, data_cursor = tag_classes[tag_type].load_from(data, data_cursor)
    tag.name = tag_name

    return tag, data_cursor


def load(filename="", buf=None):
    """Unserialize data from an entire NBT file and return the
    root TAG_Compound object. Argument can be a string containing a
    filename or a bytes-like object (or uint8 array) containing TAG_Compound data. """

    if filename:
        return loadFile(filename)
    data = bytes(buf)
    if not len(data):
        raise MalformedTag("Asked to load root tag of zero length")

    tag_type = data[0]
    if tag_type != 10:
        raise MalformedTag('Not an NBT file with a root TAG_Compound (found {0})'.format(tag_type))

    try:
        tag, data_cursor = load_named(data, 1, tag_type)
    except RecursionError as e:
        raise MalformedTag("Tag tree nested too deeply") from e
    if data_cursor != len(data):
        raise MalformedTag("{0} bytes of trailing data after the root tag".format(len(data) - data_cursor))

    return tag


__all__ = [a.__name__ for a in tag_classes.values()] + ["load", "loadFile", "MalformedTag", "MissingField"]
