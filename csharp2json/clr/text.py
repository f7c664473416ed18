# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""`System.Text.StringBuilder`."""

from __future__ import annotations

from typing import Any

from .exceptions import ArgumentOutOfRangeException
from .object import CsObject
from .ops import compose_format, to_string

_DEFAULT_CAPACITY = 16
_MAX_CAPACITY = 2**31 - 1


class StringBuilder(CsObject):
	__cs_name__ = "System.Text.StringBuilder"
	__cs_members__ = (
		("Capacity", "Capacity", "property"),
		("MaxCapacity", "MaxCapacity", "property"),
		("Length", "Length", "property"),
	)

	def __init__(self, *args: Any) -> None:
		self._chunks: list[str] = []
		self._capacity = _DEFAULT_CAPACITY
		if args and isinstance(args[0], str):
			self._chunks.append(args[0])
			args = args[1:]
		if args and isinstance(args[0], int):
			if args[0] < 0:
				raise ArgumentOutOfRangeException("'capacity' must be greater than zero.")
			self._capacity = args[0] or _DEFAULT_CAPACITY
		self._grow()

	def _text(self) -> str:
		if len(self._chunks) > 1:
			self._chunks[:] = ["".join(self._chunks)]
		return self._chunks[0] if self._chunks else ""

	def _grow(self) -> None:
		length = sum(len(c) for c in self._chunks)
		while self._capacity < length:
			self._capacity *= 2

	@property
	def Length(self) -> int:
		return len(self._text())

	@Length.setter
	def Length(self, value: int) -> None:
		if value < 0:
			raise ArgumentOutOfRangeException("Length cannot be less than zero.")
		text = self._text()
		self._chunks[:] = [text[:value].ljust(value, "\0")]
		self._grow()

	@property
	def Capacity(self) -> int:
		return self._capacity

	@Capacity.setter
	def Capacity(self, value: int) -> None:
		if value < self.Length:
			raise ArgumentOutOfRangeException("capacity was less than the current size.")
		self._capacity = value

	@property
	def MaxCapacity(self) -> int:
		return _MAX_CAPACITY

	def Append(self, value: Any, count: Any = None) -> "StringBuilder":
		if count is not None:
			# Append(char, repeatCount)
			self._chunks.append(to_string(value) * count)
		else:
			self._chunks.append(to_string(value))
		self._grow()
		return self

	def AppendLine(self, value: Any = None) -> "StringBuilder":
		self._chunks.append(to_string(value) + "\r\n")
		self._grow()
		return self

	def AppendFormat(self, template: str, *args: Any) -> "StringBuilder":
		self._chunks.append(compose_format(template, args))
		self._grow()
		return self

	def Insert(self, index: int, value: Any) -> "StringBuilder":
		text = self._text()
		if not 0 <= index <= len(text):
			raise ArgumentOutOfRangeException("Index was out of range.")
		self._chunks[:] = [text[:index] + to_string(value) + text[index:]]
		self._grow()
		return self

	def Remove(self, start: int, length: int) -> "StringBuilder":
		text = self._text()
		if start < 0 or length < 0 or start + length > len(text):
			raise ArgumentOutOfRangeException("Index was out of range.")
		self._chunks[:] = [text[:start] + text[start + length:]]
		return self

	def Replace(self, old: str, new: str) -> "StringBuilder":
		self._chunks[:] = [self._text().replace(old, "" if new is None else new)]
		self._grow()
		return self

	def Clear(self) -> "StringBuilder":
		self._chunks.clear()
		return self

	def ToString(self) -> str:
		return self._text()

