# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Collection types of `System.Collections[.Generic]` and the LINQ operators
compiled code can call.

`List`/`ArrayList` are `list` subclasses and `Dictionary`/`Hashtable` are
`dict` subclasses so serialization treats them as JSON arrays/objects. Like
every reference type they compare by identity.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

from .exceptions import (
	ArgumentException,
	ArgumentNullException,
	ArgumentOutOfRangeException,
	InvalidOperationException,
	KeyNotFoundException,
	MissingMethodException,
)
from .object import CsObject, CsValueType


def _is_int(value: Any) -> bool:
	return isinstance(value, int) and not isinstance(value, bool)


def _source(args: tuple, type_name: str) -> Iterable:
	if not args:
		return ()
	if len(args) > 1:
		raise MissingMethodException(f"Constructor on type '{type_name}' taking {len(args)} argument(s) not found.")
	(arg,) = args
	if _is_int(arg):
		if arg < 0:
			raise ArgumentOutOfRangeException("Non-negative number required.")
		return ()
	if arg is None:
		raise ArgumentNullException("Value cannot be null.")
	return arg


class List(CsObject, list):
	__cs_name__ = "System.Collections.Generic.List`1"

	__eq__ = object.__eq__
	__ne__ = object.__ne__
	__hash__ = object.__hash__

	def __init__(self, *args: Any) -> None:
		list.__init__(self, _source(args, type(self).__cs_name__))

	@property
	def Count(self) -> int:
		return len(self)

	@property
	def Capacity(self) -> int:
		return max(len(self), 4) if self else 0

	def Add(self, item: Any) -> None:
		self.append(item)

	def AddRange(self, items: Iterable) -> None:
		if items is None:
			raise ArgumentNullException("Value cannot be null.")
		self.extend(list(items))

	def Clear(self) -> None:
		del self[:]

	def Contains(self, item: Any) -> bool:
		return item in self

	def IndexOf(self, item: Any) -> int:
		try:
			return self.index(item)
		except ValueError:
			return -1

	def Insert(self, index: int, item: Any) -> None:
		if not 0 <= index <= len(self):
			raise ArgumentOutOfRangeException("Index must be within the bounds of the List.")
		self.insert(index, item)

	def Remove(self, item: Any) -> bool:
		try:
			self.remove(item)
		except ValueError:
			return False
		return True

	def RemoveAt(self, index: int) -> None:
		if not 0 <= index < len(self):
			raise ArgumentOutOfRangeException("Index was out of range.")
		del self[index]

	def Reverse(self) -> None:
		self.reverse()

	def Sort(self) -> None:
		self.sort()

	def ToArray(self) -> list:
		return list(self)

	def ToString(self) -> str:
		return type(self).__cs_name__


class ArrayList(List):
	__cs_name__ = "System.Collections.ArrayList"

	def Add(self, item: Any) -> int:
		self.append(item)
		return len(self) - 1


class Dictionary(CsObject, dict):
	__cs_name__ = "System.Collections.Generic.Dictionary`2"

	__eq__ = object.__eq__
	__ne__ = object.__ne__
	__hash__ = object.__hash__

	def __init__(self, *args: Any) -> None:
		dict.__init__(self)
		source = _source(args, type(self).__cs_name__)
		for key, value in (source.items() if isinstance(source, dict) else ()):
			self.Add(key, value)

	@property
	def Count(self) -> int:
		return len(self)

	@property
	def Keys(self) -> list:
		return list(self.keys())

	@property
	def Values(self) -> list:
		return list(self.values())

	def Add(self, key: Any, value: Any) -> None:
		if key is None:
			raise ArgumentNullException("Value cannot be null.\nParameter name: key")
		if key in self:
			raise ArgumentException("An item with the same key has already been added.")
		self[key] = value

	def ContainsKey(self, key: Any) -> bool:
		return key in self

	def ContainsValue(self, value: Any) -> bool:
		return value in self.values()

	def Remove(self, key: Any) -> bool:
		return self.pop(key, _MISSING) is not _MISSING

	def Clear(self) -> None:
		self.clear()

	def __cs_getitem__(self, key: Any) -> Any:
		if key is None:
			raise ArgumentNullException("Value cannot be null.\nParameter name: key")
		try:
			return self[key]
		except KeyError:
			raise KeyNotFoundException("The given key was not present in the dictionary.") from None

	def ToString(self) -> str:
		return type(self).__cs_name__


_MISSING = object()


class Hashtable(Dictionary):
	__cs_name__ = "System.Collections.Hashtable"

	def __cs_getitem__(self, key: Any) -> Any:
		if key is None:
			raise ArgumentNullException("Key cannot be null.")
		return self.get(key)


class _Sequence(CsObject):
	"""Shared shape for the non-list enumerable collections."""

	__cs_enumerable__ = True

	def __init__(self, *args: Any) -> None:
		self._items: list = list(_source(args, type(self).__cs_name__))

	def __iter__(self) -> Iterator:
		return iter(self._items)

	def __len__(self) -> int:
		return len(self._items)

	@property
	def Count(self) -> int:
		return len(self._items)

	def Clear(self) -> None:
		self._items.clear()

	def Contains(self, item: Any) -> bool:
		return item in self._items

	def ToArray(self) -> list:
		return list(self)


class HashSet(_Sequence):
	__cs_name__ = "System.Collections.Generic.HashSet`1"

	def __init__(self, *args: Any) -> None:
		super().__init__(*args)
		unique: list = []
		for item in self._items:
			if item not in unique:
				unique.append(item)
		self._items = unique

	def Add(self, item: Any) -> bool:
		if item in self._items:
			return False
		self._items.append(item)
		return True

	def Remove(self, item: Any) -> bool:
		if item not in self._items:
			return False
		self._items.remove(item)
		return True

	def UnionWith(self, other: Iterable) -> None:
		for item in other:
			self.Add(item)


class Queue(_Sequence):
	__cs_name__ = "System.Collections.Generic.Queue`1"

	def Enqueue(self, item: Any) -> None:
		self._items.append(item)

	def Dequeue(self) -> Any:
		if not self._items:
			raise InvalidOperationException("Queue empty.")
		return self._items.pop(0)

	def Peek(self) -> Any:
		if not self._items:
			raise InvalidOperationException("Queue empty.")
		return self._items[0]


class Stack(_Sequence):
	"""Items are kept top first, so iteration enumerates from the top."""

	__cs_name__ = "System.Collections.Generic.Stack`1"

	def __init__(self, *args: Any) -> None:
		super().__init__(*args)
		self._items.reverse()

	def Push(self, item: Any) -> None:
		self._items.insert(0, item)

	def Pop(self) -> Any:
		if not self._items:
			raise InvalidOperationException("Stack empty.")
		return self._items.pop(0)

	def Peek(self) -> Any:
		if not self._items:
			raise InvalidOperationException("Stack empty.")
		return self._items[0]


class KeyValuePair(CsValueType):
	__cs_name__ = "System.Collections.Generic.KeyValuePair`2"
	__cs_kind__ = "struct"
	__cs_members__ = (("Key", "Key", "property"), ("Value", "Value", "property"))

	def __init__(self, key: Any = None, value: Any = None) -> None:
		self.Key = key
		self.Value = value

	def ToString(self) -> str:
		from .ops import to_string

		return f"[{to_string(self.Key)}, {to_string(self.Value)}]"


# LINQ ----------------------------------------------------------------------


def _require(source: Any) -> list:
	if source is None:
		raise ArgumentNullException("Value cannot be null.\nParameter name: source")
	if isinstance(source, dict):
		return [KeyValuePair(k, v) for k, v in source.items()]
	return list(source)


def _first(source: Any) -> Any:
	items = _require(source)
	if not items:
		raise InvalidOperationException("Sequence contains no elements")
	return items[0]


def _last(source: Any) -> Any:
	items = _require(source)
	if not items:
		raise InvalidOperationException("Sequence contains no elements")
	return items[-1]


def _aggregate(fn: Callable[[list], Any]) -> Callable[[Any], Any]:
	def run(source: Any) -> Any:
		items = _require(source)
		if not items:
			raise InvalidOperationException("Sequence contains no elements")
		return fn(items)

	return run


def _distinct(source: Any) -> list:
	out: list = []
	for item in _require(source):
		if item not in out:
			out.append(item)
	return out


def _element_at(source: Any, index: int) -> Any:
	items = _require(source)
	if not 0 <= index < len(items):
		raise ArgumentOutOfRangeException("Index was out of range.")
	return items[index]


LINQ_METHODS: dict[str, Callable[..., Any]] = {
	"ToList": lambda source: List(_require(source)),
	"ToArray": lambda source: _require(source),
	"Count": lambda source: len(_require(source)),
	"LongCount": lambda source: len(_require(source)),
	"Any": lambda source: bool(_require(source)),
	"First": _first,
	"FirstOrDefault": lambda source: next(iter(_require(source)), None),
	"Last": _last,
	"LastOrDefault": lambda source: (_require(source) or [None])[-1],
	"Sum": lambda source: sum(_require(source)),
	"Max": _aggregate(max),
	"Min": _aggregate(min),
	"Average": _aggregate(lambda items: sum(items) / len(items)),
	"Distinct": _distinct,
	"Reverse": lambda source: list(reversed(_require(source))),
	"Skip": lambda source, count: _require(source)[max(count, 0):],
	"Take": lambda source, count: _require(source)[: max(count, 0)],
	"Concat": lambda source, other: _require(source) + _require(other),
	"Contains": lambda source, item: item in _require(source),
	"ElementAt": _element_at,
}


def _range(start: int, count: int) -> list:
	if count < 0:
		raise ArgumentOutOfRangeException("Specified argument was out of the range of valid values.\nParameter name: count")
	return list(range(start, start + count))


def _repeat(element: Any, count: int) -> list:
	if count < 0:
		raise ArgumentOutOfRangeException("Specified argument was out of the range of valid values.\nParameter name: count")
	return [element] * count


ENUMERABLE_STATICS: dict[str, Callable[..., Any]] = {
	"Range": _range,
	"Repeat": _repeat,
	"Empty": lambda: [],
	**LINQ_METHODS,
}


def is_enumerable(value: Any) -> bool:
	return isinstance(value, (list, dict, str)) or getattr(type(value), "__cs_enumerable__", False)


__all__ = [
	"ArrayList",
	"Dictionary",
	"ENUMERABLE_STATICS",
	"HashSet",
	"Hashtable",
	"KeyValuePair",
	"LINQ_METHODS",
	"List",
	"Queue",
	"Stack",
	"is_enumerable",
]
