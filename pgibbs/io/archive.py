"""
pgibbs/io/archive.py

Tagged little-endian binary archives.

Every value is written as a one-byte type tag followed by its payload, so
a reader can tell a field-order mismatch from a corrupt number. Scalars use
fixed numpy dtypes; float tables are written as raw <f8 buffers.
"""

from __future__ import annotations

from typing import BinaryIO, List, Sequence

import numpy as np

from pgibbs.algebra.domain import Assignment, Domain, Variable
from pgibbs.algebra.factor import TableFactor

MAGIC = b"PGIBBS\x00"
FORMAT_VERSION = 1

U64 = np.dtype("<u8")
I64 = np.dtype("<i8")
U32 = np.dtype("<u4")
F64 = np.dtype("<f8")

TAG_U64 = 1
TAG_I64 = 2
TAG_U32 = 3
TAG_F64 = 4
TAG_BOOL = 5
TAG_STR = 6
TAG_LIST = 7
TAG_F64_ARRAY = 8

_TAG_NAMES = {
    TAG_U64: "u64",
    TAG_I64: "i64",
    TAG_U32: "u32",
    TAG_F64: "f64",
    TAG_BOOL: "bool",
    TAG_STR: "str",
    TAG_LIST: "list",
    TAG_F64_ARRAY: "f64[]",
}


class CheckpointFormatError(ValueError):
    """Malformed, truncated or mismatched binary archive."""


class OArchive:
    """Output archive over a binary stream."""

    def __init__(self, stream: BinaryIO):
        self.o = stream

    def write_header(self) -> None:
        self.o.write(MAGIC)
        self.o.write(np.array(FORMAT_VERSION, dtype=U32).tobytes())

    def _tagged(self, tag: int, payload: bytes) -> None:
        self.o.write(bytes((tag,)))
        self.o.write(payload)

    def write_u64(self, x: int) -> None:
        self._tagged(TAG_U64, np.array(x, dtype=U64).tobytes())

    def write_i64(self, x: int) -> None:
        self._tagged(TAG_I64, np.array(x, dtype=I64).tobytes())

    def write_u32(self, x: int) -> None:
        self._tagged(TAG_U32, np.array(x, dtype=U32).tobytes())

    def write_f64(self, x: float) -> None:
        self._tagged(TAG_F64, np.array(x, dtype=F64).tobytes())

    def write_bool(self, x: bool) -> None:
        self._tagged(TAG_BOOL, b"\x01" if x else b"\x00")

    def write_str(self, s: str) -> None:
        raw = s.encode("utf-8")
        self._tagged(TAG_STR, np.array(len(raw), dtype=U64).tobytes() + raw)

    def write_list_len(self, n: int) -> None:
        self._tagged(TAG_LIST, np.array(n, dtype=U64).tobytes())

    def write_f64_array(self, arr: np.ndarray) -> None:
        data = np.ascontiguousarray(arr, dtype=F64)
        self._tagged(TAG_F64_ARRAY, np.array(data.size, dtype=U64).tobytes() + data.tobytes())

    def write_u64_list(self, xs: Sequence[int]) -> None:
        self.write_list_len(len(xs))
        for x in xs:
            self.write_u64(x)

    def write_str_list(self, xs: Sequence[str]) -> None:
        self.write_list_len(len(xs))
        for x in xs:
            self.write_str(x)

    def write_variable(self, v: Variable) -> None:
        self.write_u64(v.id)
        self.write_u64(v.arity)

    def write_domain(self, d: Domain) -> None:
        self.write_list_len(d.num_vars())
        for v in d.variables:
            self.write_variable(v)

    def write_assignment(self, a: Assignment) -> None:
        self.write_domain(a.domain)
        self.write_u64_list(a.values)

    def write_factor(self, f: TableFactor) -> None:
        self.write_domain(f.domain)
        self.write_f64_array(f.logp)


class IArchive:
    """Input archive over a binary stream."""

    def __init__(self, stream: BinaryIO):
        self.i = stream

    def _read(self, n: int) -> bytes:
        buf = self.i.read(n)
        if len(buf) != n:
            raise CheckpointFormatError(f"truncated archive: wanted {n} bytes, got {len(buf)}")
        return buf

    def read_header(self) -> int:
        if self._read(len(MAGIC)) != MAGIC:
            raise CheckpointFormatError("not a pgibbs archive (bad magic)")
        version = int(np.frombuffer(self._read(U32.itemsize), dtype=U32)[0])
        if version != FORMAT_VERSION:
            raise CheckpointFormatError(f"unsupported archive version {version}")
        return version

    def _expect(self, tag: int) -> None:
        got = self._read(1)[0]
        if got != tag:
            raise CheckpointFormatError(
                f"expected {_TAG_NAMES[tag]} field, found {_TAG_NAMES.get(got, f'tag {got}')}"
            )

    def _scalar(self, tag: int, dtype: np.dtype):
        self._expect(tag)
        return np.frombuffer(self._read(dtype.itemsize), dtype=dtype)[0]

    def read_u64(self) -> int:
        return int(self._scalar(TAG_U64, U64))

    def read_i64(self) -> int:
        return int(self._scalar(TAG_I64, I64))

    def read_u32(self) -> int:
        return int(self._scalar(TAG_U32, U32))

    def read_f64(self) -> float:
        return float(self._scalar(TAG_F64, F64))

    def read_bool(self) -> bool:
        self._expect(TAG_BOOL)
        b = self._read(1)
        if b not in (b"\x00", b"\x01"):
            raise CheckpointFormatError(f"invalid bool byte {b!r}")
        return b == b"\x01"

    def read_str(self) -> str:
        self._expect(TAG_STR)
        n = int(np.frombuffer(self._read(U64.itemsize), dtype=U64)[0])
        try:
            return self._read(n).decode("utf-8")
        except UnicodeDecodeError as e:
            raise CheckpointFormatError(f"invalid string field: {e}") from None

    def read_list_len(self) -> int:
        self._expect(TAG_LIST)
        return int(np.frombuffer(self._read(U64.itemsize), dtype=U64)[0])

    def read_f64_array(self) -> np.ndarray:
        self._expect(TAG_F64_ARRAY)
        n = int(np.frombuffer(self._read(U64.itemsize), dtype=U64)[0])
        return np.frombuffer(self._read(n * F64.itemsize), dtype=F64).astype(np.float64)

    def read_u64_list(self) -> List[int]:
        return [self.read_u64() for _ in range(self.read_list_len())]

    def read_str_list(self) -> List[str]:
        return [self.read_str() for _ in range(self.read_list_len())]

    def read_variable(self) -> Variable:
        vid = self.read_u64()
        arity = self.read_u64()
        try:
            return Variable(vid, arity)
        except ValueError as e:
            raise CheckpointFormatError(str(e)) from None

    def read_domain(self) -> Domain:
        vs = [self.read_variable() for _ in range(self.read_list_len())]
        try:
            return Domain(vs)
        except ValueError as e:
            raise CheckpointFormatError(str(e)) from None

    def read_assignment(self) -> Assignment:
        domain = self.read_domain()
        values = self.read_u64_list()
        try:
            return Assignment(domain, values)
        except ValueError as e:
            raise CheckpointFormatError(str(e)) from None

    def read_factor(self) -> TableFactor:
        domain = self.read_domain()
        logp = self.read_f64_array()
        try:
            return TableFactor(domain, logp)
        except ValueError as e:
            raise CheckpointFormatError(str(e)) from None
