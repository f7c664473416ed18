# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`System.Exception` and the exception types the reference set exports.

They are real Python exceptions, so `throw` compiles to a plain `raise`, and
C# constructors (`()`, `(message)`, `(message, inner)`) are honored through
the usual `__cs_ctors__` table.
"""

from __future__ import annotations

import builtins
from typing import Any, Optional

from .object import CsObject


class Exception(CsObject, builtins.Exception):
	__cs_name__ = "System.Exception"
	__cs_members__ = (("Message", "Message", "property"), ("InnerException", "InnerException", "property"))

	def __init__(self, *args: Any) -> None:
		CsObject.__init__(self, *args)

	def _init_exception(self, message: Optional[str] = None, inner: Any = None) -> None:
		builtins.Exception.__init__(self, *(() if message is None else (message,)))
		self._message = message
		self.InnerException = inner

	@property
	def Message(self) -> str:
		if self._message is None:
			return f"Exception of type '{type(self).__cs_name__}' was thrown."
		return self._message

	def ToString(self) -> str:
		return f"{type(self).__cs_name__}: {self.Message}"

	def __str__(self) -> str:
		return self.Message

	def __cs_json__(self) -> dict:
		# Exceptions are ISerializable: Json.NET writes the GetObjectData fields.
		return {
			"ClassName": type(self).__cs_name__,
			"Message": self._message,
			"Data": None,
			"InnerException": self.InnerException,
			"HelpURL": None,
			"StackTraceString": None,
			"RemoteStackTraceString": None,
			"RemoteStackIndex": 0,
			"ExceptionMethod": None,
			"HResult": -2146233088,
			"Source": None,
			"WatsonBuckets": None,
		}


def _exception_ctors() -> tuple:
	return (
		(lambda self: Exception._init_exception(self), (), 0),
		(lambda self, message: Exception._init_exception(self, message), (None,), 1),
		(lambda self, message, inner: Exception._init_exception(self, message, inner), (None, None), 2),
	)


Exception.__cs_ctors__ = _exception_ctors()


def derive_exception(name: str, full_name: str, base: type) -> type:
	cls = type(name, (base,), {"__cs_name__": full_name, "__module__": __name__})
	cls.__cs_ctors__ = _exception_ctors()
	return cls


SystemException = derive_exception("SystemException", "System.SystemException", Exception)
ArgumentException = derive_exception("ArgumentException", "System.ArgumentException", SystemException)
ArgumentNullException = derive_exception("ArgumentNullException", "System.ArgumentNullException", ArgumentException)
ArgumentOutOfRangeException = derive_exception(
	"ArgumentOutOfRangeException", "System.ArgumentOutOfRangeException", ArgumentException
)
ArithmeticException = derive_exception("ArithmeticException", "System.ArithmeticException", SystemException)
DivideByZeroException = derive_exception("DivideByZeroException", "System.DivideByZeroException", ArithmeticException)
OverflowException = derive_exception("OverflowException", "System.OverflowException", ArithmeticException)
FormatException = derive_exception("FormatException", "System.FormatException", SystemException)
IndexOutOfRangeException = derive_exception("IndexOutOfRangeException", "System.IndexOutOfRangeException", SystemException)
InvalidCastException = derive_exception("InvalidCastException", "System.InvalidCastException", SystemException)
InvalidOperationException = derive_exception("InvalidOperationException", "System.InvalidOperationException", SystemException)
NotImplementedException = derive_exception("NotImplementedException", "System.NotImplementedException", SystemException)
NotSupportedException = derive_exception("NotSupportedException", "System.NotSupportedException", SystemException)
NullReferenceException = derive_exception("NullReferenceException", "System.NullReferenceException", SystemException)
MemberAccessException = derive_exception("MemberAccessException", "System.MemberAccessException", SystemException)
MissingMemberException = derive_exception("MissingMemberException", "System.MissingMemberException", MemberAccessException)
MissingMethodException = derive_exception("MissingMethodException", "System.MissingMethodException", MissingMemberException)
KeyNotFoundException = derive_exception(
	"KeyNotFoundException", "System.Collections.Generic.KeyNotFoundException", SystemException
)

EXCEPTION_TYPES = (
	Exception,
	SystemException,
	ArgumentException,
	ArgumentNullException,
	ArgumentOutOfRangeException,
	ArithmeticException,
	DivideByZeroException,
	OverflowException,
	FormatException,
	IndexOutOfRangeException,
	InvalidCastException,
	InvalidOperationException,
	NotImplementedException,
	NotSupportedException,
	NullReferenceException,
	MemberAccessException,
	MissingMemberException,
	MissingMethodException,
	KeyNotFoundException,
)


def null_reference() -> NullReferenceException:
	return NullReferenceException("Object reference not set to an instance of an object.")


def as_exception(value: Any) -> BaseException:
	"""What `throw value;` raises."""
	if value is None:
		return null_reference()
	if isinstance(value, BaseException):
		return value
	return InvalidCastException(f"Type '{type(value).__name__}' is not an exception.")
