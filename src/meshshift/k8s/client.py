# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/meshshift/k8s/client.py
from __future__ import annotations

import logging
from typing import Optional

from kubernetes import client, config

log = logging.getLogger("meshshift")


def build_custom_objects_api(
    *,
    kubeconfig: Optional[str] = None,
    kube_context: Optional[str] = None,
    in_cluster: bool = False,
) -> client.CustomObjectsApi:
    """
    Load cluster credentials and return a CustomObjectsApi.

    Args:
        kubeconfig: path to a kubeconfig file (default: $KUBECONFIG / ~/.kube/config)
        kube_context: optional kube context to load
        in_cluster: use the pod service account instead of a kubeconfig
    """
    if in_cluster:
        config.load_incluster_config()
        log.debug("[k8s] loaded in-cluster config")
    else:
        config.load_kube_config(config_file=kubeconfig, context=kube_context)
        log.debug(
            "[k8s] loaded kubeconfig file=%s context=%s",
            kubeconfig or "<default>",
            kube_context or "<current>",
        )

    return client.CustomObjectsApi()
