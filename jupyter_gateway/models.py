"""
Typed views of the JSON models served by the Jupyter REST API.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gateway_core.exceptions import ValidationError


def _require(data: Any, key: str, kind: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid {kind} model", {"type": type(data).__name__})
    if key not in data or data[key] is None:
        raise ValidationError(f"Missing '{key}' in {kind} model", {"keys": sorted(data.keys())})
    return data[key]


@dataclass
class KernelModel:
    """A running kernel as reported by ``/api/kernels``."""

    id: str
    name: str
    last_activity: Optional[str] = None
    execution_state: Optional[str] = None
    connections: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KernelModel":
        return cls(
            id=_require(data, 'id', 'kernel'),
            name=_require(data, 'name', 'kernel'),
            last_activity=data.get('last_activity'),
            execution_state=data.get('execution_state'),
            connections=data.get('connections') or 0,
        )


@dataclass
class SessionModel:
    """A session as reported by ``/api/sessions``."""

    id: str
    kernel: KernelModel
    path: str = ""
    name: str = ""
    type: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionModel":
        return cls(
            id=_require(data, 'id', 'session'),
            kernel=KernelModel.from_dict(_require(data, 'kernel', 'session')),
            path=data.get('path') or "",
            name=data.get('name') or "",
            type=data.get('type') or "",
        )


@dataclass
class KernelSpecModel:
    """One kernel spec entry, flattened from its ``spec`` sub-document."""

    name: str
    display_name: str
    language: str
    argv: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    resources: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KernelSpecModel":
        name = _require(data, 'name', 'kernel spec')
        spec = _require(data, 'spec', 'kernel spec')
        argv = spec.get('argv') if isinstance(spec, dict) else None
        if argv is not None and not isinstance(argv, list):
            raise ValidationError("Kernel spec argv must be a list", {"name": name})
        return cls(
            name=name,
            display_name=_require(spec, 'display_name', 'kernel spec'),
            language=_require(spec, 'language', 'kernel spec'),
            argv=list(argv or []),
            env=dict(spec.get('env') or {}),
            metadata=dict(spec.get('metadata') or {}),
            resources=dict(data.get('resources') or {}),
        )


@dataclass
class KernelSpecs:
    """The ``/api/kernelspecs`` document; ``kernelspecs`` keeps server order."""

    default: str = ""
    kernelspecs: Dict[str, KernelSpecModel] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KernelSpecs":
        raw_specs = _require(data, 'kernelspecs', 'kernel specs')
        if not isinstance(raw_specs, dict):
            raise ValidationError("Kernel specs must be a mapping")
        return cls(
            default=data.get('default') or "",
            kernelspecs={key: KernelSpecModel.from_dict(value) for key, value in raw_specs.items()},
        )
