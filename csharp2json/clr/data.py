# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`System.Data` (DataSet/DataTable) and `System.Data.Entity` (EntityKey) types.

Only the surface sample DTOs touch is modeled: names, empty table/row
collections and the entity-key properties. `__cs_json__` gives the Json.NET
converter shapes (a DataSet is an object of tables, a DataTable an array of
rows).
"""

from __future__ import annotations

from typing import Any

from .collections import List
from .object import CsObject, IntEnum, enum_missing


class DataTable(CsObject):
	__cs_name__ = "System.Data.DataTable"
	__cs_members__ = (
		("TableName", "TableName", "property"),
		("Rows", "Rows", "property"),
		("Columns", "Columns", "property"),
	)

	def __init__(self, table_name: str = "") -> None:
		self.TableName = table_name
		self.Rows = List()
		self.Columns = List()

	def ToString(self) -> str:
		return self.TableName

	def __cs_json__(self) -> list:
		return list(self.Rows)


class _TableCollection(List):
	__cs_name__ = "System.Data.DataTableCollection"

	def Add(self, table: Any = None) -> DataTable:
		if table is None or isinstance(table, str):
			table = DataTable(table or f"Table{len(self) + 1}")
		self.append(table)
		return table


class DataSet(CsObject):
	__cs_name__ = "System.Data.DataSet"
	__cs_members__ = (("DataSetName", "DataSetName", "property"), ("Tables", "Tables", "property"))

	def __init__(self, name: str = "NewDataSet") -> None:
		self.DataSetName = name
		self.Tables = _TableCollection()

	def __cs_json__(self) -> dict:
		return {table.TableName: table for table in self.Tables}


class EntityState(IntEnum):
	_missing_ = enum_missing

	Detached = 1
	Unchanged = 2
	Added = 4
	Deleted = 8
	Modified = 16


EntityState.__cs_name__ = "System.Data.EntityState"


class EntityKey(CsObject):
	__cs_name__ = "System.Data.EntityKey"
	__cs_members__ = (
		("EntitySetName", "EntitySetName", "property"),
		("EntityContainerName", "EntityContainerName", "property"),
		("EntityKeyValues", "EntityKeyValues", "property"),
		("IsTemporary", "IsTemporary", "property"),
	)

	def __init__(self, qualified_set_name: str = None, key_name: str = None, key_value: Any = None) -> None:
		self.EntityContainerName = None
		self.EntitySetName = None
		self.EntityKeyValues = None
		if qualified_set_name is not None:
			container, _, entity_set = qualified_set_name.rpartition(".")
			self.EntityContainerName = container or None
			self.EntitySetName = entity_set
		if key_name is not None:
			self.EntityKeyValues = [{"Key": key_name, "Value": key_value}]

	@property
	def IsTemporary(self) -> bool:
		return self.EntitySetName is None
