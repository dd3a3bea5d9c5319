"""Shared fixtures for BDD tests."""

from pathlib import Path

import pytest

from pgnode.domain.instance import LocalInstanceState
from tests.core.unit.fakes.resources import CLUSTER_NAME, NAMESPACE, POD_NAME


@pytest.fixture
def instance(tmp_path: Path) -> LocalInstanceState:
    """Local node identity with a temporary data directory.

    Returns:
        LocalInstanceState for the first member of the example cluster.
    """
    pgdata = tmp_path / "pgdata"
    pgdata.mkdir()
    return LocalInstanceState(
        pod_name=POD_NAME,
        namespace=NAMESPACE,
        cluster_name=CLUSTER_NAME,
        pgdata=pgdata,
    )
