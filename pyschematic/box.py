from functools import reduce
import itertools
import operator

from .schematicbase import IndexOutOfBounds

__all__ = ['BoundingBox', 'blockIndex', 'blockPosition']


def blockIndex(x, y, z, width, length, height=None):
    """Offset of (x, y, z) in a Blocks or Data buffer. Buffers are ordered
    y, z, x with x varying fastest; other tools read them in that order.

    Raises IndexOutOfBounds for coordinates outside the volume. y is only
    checked against height when height is given."""
    if not (0 <= x < width and 0 <= z < length and 0 <= y):
        raise IndexOutOfBounds("({0}, {1}, {2}) is outside a {3}x?x{4} volume".format(x, y, z, width, length))
    if height is not None and y >= height:
        raise IndexOutOfBounds("({0}, {1}, {2}) is outside a {3}x{4}x{5} volume".format(x, y, z, width, height, length))
    return (y * length + z) * width + x


def blockPosition(index, width, length):
    """Inverse of blockIndex: the (x, y, z) stored at a buffer offset."""
    if index < 0 or not width or not length:
        raise IndexOutOfBounds("No position for offset {0} in a {1}x?x{2} volume".format(index, width, length))
    rest, x = divmod(index, width)
    y, z = divmod(rest, length)
    return x, y, z


class BoundingBox(object):
    """An axis-aligned box of whole blocks. origin is the minimum corner and
    size is (width, height, length); the max* properties are exclusive."""
    type = int

    def __init__(self, origin=(0, 0, 0), size=(0, 0, 0)):
        if isinstance(origin, BoundingBox):
            self._origin = list(origin._origin)
            self._size = list(origin._size)
        else:
            self._origin, self._size = list(map(self.type, origin)), list(map(self.type, size))

    @classmethod
    def fromCorners(cls, minimum, maximum):
        """Box spanning two inclusive corners, as a host's min/max bounding
        volume describes them: width = maxX - minX + 1 and so on."""
        minimum = [int(a) for a in minimum]
        maximum = [int(b) for b in maximum]
        return cls(minimum, [b - a + 1 for a, b in zip(minimum, maximum)])

    @classmethod
    def fromPositions(cls, positions):
        """Smallest box holding every (x, y, z) in positions. The minimum
        along an axis may be negative. An empty input gives an empty box."""
        positions = iter(positions)
        try:
            first = next(positions)
        except StopIteration:
            return cls()

        minimum = list(first)
        maximum = list(first)
        for pos in positions:
            for axis in range(3):
                if pos[axis] < minimum[axis]:
                    minimum[axis] = pos[axis]
                elif pos[axis] > maximum[axis]:
                    maximum[axis] = pos[axis]

        return cls.fromCorners(minimum, maximum)

    @property
    def origin(self):
        return self._origin

    @property
    def size(self):
        return self._size

    minx = property(lambda self: self._origin[0])
    miny = property(lambda self: self._origin[1])
    minz = property(lambda self: self._origin[2])

    maxx = property(lambda self: self._origin[0] + self._size[0])
    maxy = property(lambda self: self._origin[1] + self._size[1])
    maxz = property(lambda self: self._origin[2] + self._size[2])

    width = property(lambda self: self._size[0], None, None, "The dimension along the X axis")
    height = property(lambda self: self._size[1], None, None, "The dimension along the Y axis")
    length = property(lambda self: self._size[2], None, None, "The dimension along the Z axis")

    @property
    def maximum(self):
        """The endpoint of the box; origin plus size."""
        return [a + b for a, b in zip(self._origin, self._size)]

    @property
    def volume(self):
        return reduce(operator.mul, self._size)

    @property
    def positions(self):
        """iterate through all of the positions within this selection box"""
        return itertools.product(
            range(self.minx, self.maxx),
            range(self.miny, self.maxy),
            range(self.minz, self.maxz)
        )

    def relativeIndex(self, x, y, z):
        """Buffer offset of the absolute position (x, y, z) in a buffer sized to this box."""
        return blockIndex(x - self.minx, y - self.miny, z - self.minz, self.width, self.length, self.height)

    def __contains__(self, pos):
        x, y, z = pos
        if x < self.minx or x >= self.maxx:
            return False
        if y < self.miny or y >= self.maxy:
            return False
        if z < self.minz or z >= self.maxz:
            return False

        return True

    def __eq__(self, b):
        if not isinstance(b, BoundingBox):
            return NotImplemented
        return (self.origin, self.size) == (b.origin, b.size)

    __hash__ = None

    def __repr__(self):
        return "BoundingBox({0}, {1})".format(self.origin, self.size)
