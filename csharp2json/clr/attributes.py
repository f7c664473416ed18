# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Attribute classes the reference set exports.

Attributes are resolved at compile time (unknown names are CS0246) but never
instantiated while materializing; the classes exist so user code can derive
from them and so `[NonSerialized]` can be recognized by full name.
"""

from __future__ import annotations

from typing import Any

from .object import CsObject, CsType


class Attribute(CsObject):
	__cs_name__ = "System.Attribute"
	__cs_members__ = (("TypeId", "TypeId", "property"),)

	def __init__(self, *args: Any) -> None:
		self._args = args

	@property
	def TypeId(self) -> CsType:
		return CsType.of(type(self))


def _attribute(name: str, namespace: str) -> type:
	return type(name, (Attribute,), {"__cs_name__": f"{namespace}.{name}", "__module__": __name__})


# mscorlib
SerializableAttribute = _attribute("SerializableAttribute", "System")
NonSerializedAttribute = _attribute("NonSerializedAttribute", "System")
ObsoleteAttribute = _attribute("ObsoleteAttribute", "System")
FlagsAttribute = _attribute("FlagsAttribute", "System")
CLSCompliantAttribute = _attribute("CLSCompliantAttribute", "System")

# System
DescriptionAttribute = _attribute("DescriptionAttribute", "System.ComponentModel")
DefaultValueAttribute = _attribute("DefaultValueAttribute", "System.ComponentModel")
DisplayNameAttribute = _attribute("DisplayNameAttribute", "System.ComponentModel")
BrowsableAttribute = _attribute("BrowsableAttribute", "System.ComponentModel")
CategoryAttribute = _attribute("CategoryAttribute", "System.ComponentModel")

# System.Xml
XmlRootAttribute = _attribute("XmlRootAttribute", "System.Xml.Serialization")
XmlElementAttribute = _attribute("XmlElementAttribute", "System.Xml.Serialization")
XmlAttributeAttribute = _attribute("XmlAttributeAttribute", "System.Xml.Serialization")
XmlIgnoreAttribute = _attribute("XmlIgnoreAttribute", "System.Xml.Serialization")
XmlArrayAttribute = _attribute("XmlArrayAttribute", "System.Xml.Serialization")
XmlArrayItemAttribute = _attribute("XmlArrayItemAttribute", "System.Xml.Serialization")
XmlTypeAttribute = _attribute("XmlTypeAttribute", "System.Xml.Serialization")
XmlEnumAttribute = _attribute("XmlEnumAttribute", "System.Xml.Serialization")

NON_SERIALIZED = NonSerializedAttribute.__cs_name__

MSCORLIB_ATTRIBUTES = (
	Attribute,
	SerializableAttribute,
	NonSerializedAttribute,
	ObsoleteAttribute,
	FlagsAttribute,
	CLSCompliantAttribute,
)

SYSTEM_ATTRIBUTES = (
	DescriptionAttribute,
	DefaultValueAttribute,
	DisplayNameAttribute,
	BrowsableAttribute,
	CategoryAttribute,
)

XML_ATTRIBUTES = (
	XmlRootAttribute,
	XmlElementAttribute,
	XmlAttributeAttribute,
	XmlIgnoreAttribute,
	XmlArrayAttribute,
	XmlArrayItemAttribute,
	XmlTypeAttribute,
	XmlEnumAttribute,
)
