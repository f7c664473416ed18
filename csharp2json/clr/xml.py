# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""`System.Xml.XmlDocument`, backed by `xml.etree.ElementTree`."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Optional

from .exceptions import Exception as CsException
from .exceptions import derive_exception
from .object import CsObject

XmlException = derive_exception("XmlException", "System.Xml.XmlException", CsException)


class XmlNode(CsObject):
	__cs_name__ = "System.Xml.XmlNode"

	def __init__(self, element: Optional[ET.Element] = None) -> None:
		self._element = element

	@property
	def Name(self) -> str:
		return "" if self._element is None else self._element.tag

	@property
	def InnerText(self) -> str:
		if self._element is None:
			return ""
		return "".join(self._element.itertext())

	@property
	def OuterXml(self) -> str:
		if self._element is None:
			return ""
		return ET.tostring(self._element, encoding="unicode")


class XmlDocument(XmlNode):
	__cs_name__ = "System.Xml.XmlDocument"

	def __init__(self) -> None:
		super().__init__(None)

	@property
	def Name(self) -> str:
		return "#document"

	@property
	def DocumentElement(self) -> Optional[XmlNode]:
		return None if self._element is None else XmlNode(self._element)

	def LoadXml(self, text: str) -> None:
		try:
			self._element = ET.fromstring(text)
		except ET.ParseError as err:
			raise XmlException(str(err)) from err

	def __cs_json__(self) -> dict:
		# Json.NET's XmlNodeConverter: root element name -> text content.
		if self._element is None:
			return {}
		return {self._element.tag: self.InnerText or None}
