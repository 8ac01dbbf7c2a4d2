from collections.abc import Iterator

import pytest

from typedeps.cache import RemoteFetchCache


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--runintegration",
        action="store_true",
        default=False,
        help="run integration tests that call remote services",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: mark test as calling a remote service")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--runintegration"):
        # --runintegration given in cli: do not skip integration tests
        return
    skip_integration = pytest.mark.skip(reason="need --runintegration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def memory_cache() -> Iterator[RemoteFetchCache]:
    """A remote fetch cache that is never written to disk."""
    with RemoteFetchCache(":memory:") as cache:
        yield cache
