"""
Request parameter filter: chainable call modifiers (object id, mask, filter, result limit).

    ticket_service.object_with_id(35212).object_mask("mask[createDate]").getObject()

Each step returns a new filter; nothing is mutated, so chains built from the same
service never see each other's parameters.
"""
from __future__ import annotations

import copy
import functools
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from slapi.core.errors import ProgrammingError

if TYPE_CHECKING:
    from slapi.service.proxy import Service

FILTER_OPERATIONS = frozenset({"object_with_id", "object_mask", "object_filter", "result_limit"})


@dataclass(frozen=True)
class CallParameters:
    """Information *about* a call, sent as headers rather than as arguments."""

    object_id: Any = None
    object_mask: tuple[str, ...] | Mapping[str, Any] | None = None
    object_filter: Mapping[str, Any] | None = None
    result_offset: int | None = None
    result_limit: int | None = None

    def wire_mask(self) -> Any:
        """A single mask string as-is, several as "[m1,m2]", a structured mask unchanged."""
        mask = self.object_mask
        if mask is None:
            return None
        if isinstance(mask, Mapping):
            return mask
        masks = [m for m in mask if m]
        if not masks:
            return None
        if len(masks) == 1:
            return masks[0]
        return "[" + ",".join(masks) + "]"


def _check_non_negative(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ProgrammingError(f"{name} must be a non-negative integer, got {value!r}")


class ParameterFilter:
    """
    Wraps a Service plus the parameters collected so far.
    Anything that is not a parameter-setting call is forwarded to the service as a remote
    method, with the collected parameters attached.
    """

    def __init__(self, target: Service | ParameterFilter, parameters: CallParameters | None = None) -> None:
        if isinstance(target, ParameterFilter):
            parameters = parameters or target.parameters
            target = target.target
        self._target = target
        self._parameters = parameters or CallParameters()

    @property
    def target(self) -> Service:
        """The service calls are finally sent to."""
        return self._target

    @property
    def parameters(self) -> CallParameters:
        return self._parameters

    @property
    def service_name(self) -> str:
        return self._target.service_name

    def _with(self, **changes: Any) -> ParameterFilter:
        return ParameterFilter(self._target, replace(self._parameters, **changes))

    def object_with_id(self, object_id: Any) -> ParameterFilter:
        """Target one object instance: ticket_service.object_with_id(35212).getObject()."""
        if object_id is None:
            raise ProgrammingError("object_with_id requires an object id")
        return self._with(object_id=object_id)

    def object_mask(self, *masks: str | Mapping[str, Any]) -> ParameterFilter:
        """
        Extended object mask strings ("mask[createDate, modifyDate]", "mask(SoftLayer_Hardware).id"),
        or one structured mask. Replaces any earlier mask.
        """
        if not masks:
            raise ProgrammingError("object_mask requires at least one mask")
        if len(masks) == 1 and isinstance(masks[0], Mapping):
            return self._with(object_mask=copy.deepcopy(masks[0]))
        for mask in masks:
            if not isinstance(mask, str):
                raise ProgrammingError(f"object mask must be a string, got {type(mask).__name__}")
        return self._with(object_mask=tuple(masks))

    def object_filter(self, object_filter: Mapping[str, Any]) -> ParameterFilter:
        """Restrict which objects a list-returning call returns. The mapping is copied, so later edits to it do not leak in."""
        if not isinstance(object_filter, Mapping):
            raise ProgrammingError(f"object filter must be a mapping, got {type(object_filter).__name__}")
        return self._with(object_filter=copy.deepcopy(object_filter))

    def result_limit(self, offset: int | None, limit: int) -> ParameterFilter:
        """
        Page through results: result_limit(0, 5), then result_limit(5, 5), ...
        offset=None sends 0.
        """
        if offset is not None:
            _check_non_negative("offset", offset)
        _check_non_negative("limit", limit)
        return self._with(result_offset=offset, result_limit=limit)

    def invoke(self, method_name: str, *args: Any) -> Any:
        """Explicit dispatcher: parameter operations stay local, everything else goes to the API."""
        if method_name in FILTER_OPERATIONS:
            return getattr(self, method_name)(*args)
        return self._target.call_with_params(method_name, self._parameters, args)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return functools.partial(self.invoke, name)

    def __repr__(self) -> str:
        return f"<ParameterFilter {self.service_name} {self._parameters}>"
