# millcalc/catalog.py
# Id-indexed, read-only collections of machines, spindles, tools and materials.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

from millcalc.errors import CatalogError
from millcalc.models import (
    Machine, MachineRow, Material, MaterialRow, Spindle, SpindleRow, Tool, ToolRow, row_problems,
)

logger = logging.getLogger(__name__)


def _frozen(records: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(records))


@dataclass(frozen=True)
class Catalog:
    machines: Mapping[str, Machine] = field(default_factory=dict)
    spindles: Mapping[str, Spindle] = field(default_factory=dict)
    tools: Mapping[str, Tool] = field(default_factory=dict)
    materials: Mapping[str, Material] = field(default_factory=dict)

    def __post_init__(self):
        for name in ("machines", "spindles", "tools", "materials"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    @classmethod
    def from_records(
        cls,
        machines: Iterable[Machine] = (),
        spindles: Iterable[Spindle] = (),
        tools: Iterable[Tool] = (),
        materials: Iterable[Material] = (),
    ) -> "Catalog":
        return cls(
            machines={m.id: m for m in machines},
            spindles={s.id: s for s in spindles},
            tools={t.id: t for t in tools},
            materials={m.id: m for m in materials},
        )

    def machine(self, machine_id: str) -> Optional[Machine]:
        return self.machines.get(machine_id)

    def spindle(self, spindle_id: str) -> Optional[Spindle]:
        return self.spindles.get(spindle_id)

    def tool(self, tool_id: str) -> Optional[Tool]:
        return self.tools.get(tool_id)

    def material(self, material_id: str) -> Optional[Material]:
        return self.materials.get(material_id)

    def with_tool(self, tool: Tool) -> "Catalog":
        tools = dict(self.tools)
        tools[tool.id] = tool
        return Catalog(self.machines, self.spindles, tools, self.materials)

    def summary(self) -> dict:
        return {
            "machines": sorted(self.machines),
            "spindles": sorted(self.spindles),
            "tools": sorted(self.tools),
            "materials": sorted(self.materials),
        }


def _load_section(
    kind: str,
    rows: Iterable[Mapping[str, Any]],
    schema: Type[BaseModel],
    problems: list[str],
) -> dict:
    loaded = {}
    for index, row in enumerate(rows):
        try:
            record = schema.model_validate(row).to_record()
        except ValidationError as e:
            problems.append(f"{kind}[{index}]: {'; '.join(row_problems(e))}")
            continue
        if record.id in loaded:
            problems.append(f"{kind}[{index}]: duplicate id {record.id!r}")
            continue
        loaded[record.id] = record
    return loaded


def load_catalog(raw: Mapping[str, Iterable[Mapping[str, Any]]], strict: bool = True) -> Catalog:
    """Build a Catalog from raw dict rows keyed by section name.

    Every bad row is collected. ``strict`` raises one CatalogError listing
    them all; otherwise bad rows are logged and skipped.
    """
    problems: list[str] = []
    catalog = Catalog(
        machines=_load_section("machines", raw.get("machines", ()), MachineRow, problems),
        spindles=_load_section("spindles", raw.get("spindles", ()), SpindleRow, problems),
        tools=_load_section("tools", raw.get("tools", ()), ToolRow, problems),
        materials=_load_section("materials", raw.get("materials", ()), MaterialRow, problems),
    )

    if problems:
        if strict:
            raise CatalogError("Catalog failed to load", problems)
        for problem in problems:
            logger.warning("Skipping catalog entry %s", problem)

    logger.debug(
        "Loaded catalog: %d machines, %d spindles, %d tools, %d materials",
        len(catalog.machines), len(catalog.spindles), len(catalog.tools), len(catalog.materials),
    )
    return catalog
