# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/config/models.py

import uuid
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

from meshshift.router.models import Shift, Traffic
from meshshift.utils.labels import parse_selector


def _labels(value: Union[str, Dict[str, str], None]) -> Dict[str, str]:
    # "app=x,env=y" or a plain mapping
    if value is None:
        return {}
    if isinstance(value, str):
        return parse_selector(value)
    return {str(k): str(v) for k, v in value.items()}


class KubeConfig(BaseModel):
    context: Optional[str] = None
    kubeconfig: Optional[str] = None
    in_cluster: bool = False
    api_version: str = "v1beta1"


class ServiceConfig(BaseModel):
    name: str
    namespace: str
    build: int = Field(ge=0)


class ShiftSpec(BaseModel):
    port: int = 0
    hostname: str = ""
    selector: Dict[str, str] = Field(default_factory=dict)
    pod_selector: Dict[str, str] = Field(default_factory=dict)

    @field_validator("selector", "pod_selector", mode="before")
    @classmethod
    def _decode_labels(cls, v):
        return _labels(v)

    def to_shift(self) -> Shift:
        return Shift(
            port=self.port,
            hostname=self.hostname,
            selector=dict(self.selector),
            traffic=Traffic(pod_selector=dict(self.pod_selector)),
        )


class ShiftConfig(BaseModel):
    tracking_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kube: KubeConfig = KubeConfig()
    service: ServiceConfig
    shift: ShiftSpec
