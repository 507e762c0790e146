"""A packed point cloud with named fields, laid out as in sensor messages."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterable, Iterator, Sequence


class DataType(IntEnum):
    """Scalar types a point field may hold."""

    INT8 = 1
    UINT8 = 2
    INT16 = 3
    UINT16 = 4
    INT32 = 5
    UINT32 = 6
    FLOAT32 = 7
    FLOAT64 = 8

    @property
    def code(self) -> str:
        return _CODES[self]

    @property
    def size(self) -> int:
        return struct.calcsize(self.code)


_CODES = {
    DataType.INT8: "b",
    DataType.UINT8: "B",
    DataType.INT16: "h",
    DataType.UINT16: "H",
    DataType.INT32: "i",
    DataType.UINT32: "I",
    DataType.FLOAT32: "f",
    DataType.FLOAT64: "d",
}


@dataclass(frozen=True)
class PointField:
    """One named field of a point: its byte offset, type and element count."""

    name: str
    offset: int
    datatype: DataType = DataType.FLOAT32
    count: int = 1

    @property
    def size(self) -> int:
        """Number of bytes the field takes."""
        return DataType(self.datatype).size * self.count

    def _format(self, prefix: str) -> str:
        return f"{prefix}{self.count}{DataType(self.datatype).code}"

    def unpack(self, data, start: int, prefix: str):
        values = struct.unpack_from(self._format(prefix), data, start + self.offset)
        return values[0] if self.count == 1 else values

    def pack_into(self, buffer: bytearray, start: int, prefix: str, value) -> None:
        values = (value,) if self.count == 1 else tuple(value)
        if len(values) != self.count:
            raise ValueError(f"field {self.name!r} takes {self.count} values")
        struct.pack_into(self._format(prefix), buffer, start + self.offset, *values)


_XYZ_FIELDS = (
    PointField("x", 0, DataType.FLOAT32),
    PointField("y", 4, DataType.FLOAT32),
    PointField("z", 8, DataType.FLOAT32),
)


@dataclass
class PointCloud:
    """Points packed into a byte buffer according to their field layout."""

    header: Any = None
    height: int = 1
    width: int = 0
    fields: list[PointField] = field(default_factory=list)
    is_bigendian: bool = False
    point_step: int = 0
    row_step: int = 0
    data: bytearray = field(default_factory=bytearray)
    is_dense: bool = False

    @classmethod
    def xyz(cls, header: Any = None) -> PointCloud:
        """Return an empty cloud of float32 ``x``, ``y`` and ``z`` points."""
        return cls(header=header, fields=list(_XYZ_FIELDS), point_step=12)

    @classmethod
    def from_points(
        cls,
        points: Iterable[Sequence],
        fields: Sequence[PointField] | None = None,
        header: Any = None,
    ) -> PointCloud:
        """Pack points, each a sequence with one value per field, into a cloud."""
        layout = list(fields) if fields is not None else list(_XYZ_FIELDS)
        if not layout:
            raise ValueError("a point cloud needs at least one field")
        step = max(f.offset + f.size for f in layout)
        data = bytearray()
        width = 0
        for point in points:
            values = tuple(point)
            if len(values) != len(layout):
                raise ValueError(
                    f"point has {len(values)} values, expected {len(layout)}"
                )
            chunk = bytearray(step)
            for point_field, value in zip(layout, values):
                point_field.pack_into(chunk, 0, "<", value)
            data += chunk
            width += 1
        return cls(
            header=header,
            width=width,
            fields=layout,
            point_step=step,
            row_step=step * width,
            data=data,
        )

    def __len__(self) -> int:
        return self.width * self.height

    @property
    def _prefix(self) -> str:
        return ">" if self.is_bigendian else "<"

    def append_xyz(self, point: Sequence[float]) -> None:
        """Append one point to a single-row cloud of float32 ``x, y, z``."""
        if tuple(self.fields) != _XYZ_FIELDS or self.point_step != 12:
            raise ValueError("cloud is not laid out as float32 x, y, z")
        if self.height != 1:
            raise ValueError("points can only be appended to a single-row cloud")
        x, y, z = point
        self.data += struct.pack(f"{self._prefix}3f", x, y, z)
        self.width += 1
        self.row_step = self.point_step * self.width

    def _select(self, names: Sequence[str]) -> list[PointField]:
        if not names:
            return list(self.fields)
        by_name = {f.name: f for f in self.fields}
        missing = [name for name in names if name not in by_name]
        if missing:
            raise ValueError(f"cloud has no field named {', '.join(missing)}")
        return [by_name[name] for name in names]

    def iter_points(self, *names: str) -> Iterator[tuple]:
        """Yield each point as a tuple of the named fields, or of all fields."""
        selected = self._select(names)
        prefix = self._prefix
        row_step = self.row_step or self.point_step * self.width
        needed = (self.height - 1) * row_step + self.width * self.point_step
        if len(self) and len(self.data) < needed:
            raise ValueError("point data is shorter than the cloud's layout")
        for row in range(self.height):
            base = row * row_step
            for column in range(self.width):
                start = base + column * self.point_step
                yield tuple(f.unpack(self.data, start, prefix) for f in selected)