from __future__ import annotations

import pytest

from app.services.kma_grid import GridPoint, is_in_regional_coverage, to_provider_grid


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (33.0, 124.0),
        (39.0, 132.0),
        (37.5665, 126.9780),
        (35.1796, 129.0756),
        (33.4996, 126.5312),
    ],
)
def test_coverage_box_includes_korea_and_edges(lat: float, lon: float) -> None:
    assert is_in_regional_coverage(lat, lon) is True


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (40.7128, -74.0060),  # New York
        (35.6762, 139.6503),  # Tokyo
        (32.99, 127.0),
        (39.01, 127.0),
        (37.0, 123.99),
        (37.0, 132.01),
    ],
)
def test_coverage_box_excludes_outside_points(lat: float, lon: float) -> None:
    assert is_in_regional_coverage(lat, lon) is False


def test_seoul_maps_to_reference_grid_cell() -> None:
    assert to_provider_grid(37.5665, 126.9780) == GridPoint(nx=60, ny=127)


def test_grid_projection_is_deterministic() -> None:
    first = to_provider_grid(35.1796, 129.0756)
    second = to_provider_grid(35.1796, 129.0756)

    assert first == second
    assert isinstance(first.nx, int) and isinstance(first.ny, int)


def test_grid_axes_follow_geography() -> None:
    seoul = to_provider_grid(37.5665, 126.9780)
    busan = to_provider_grid(35.1796, 129.0756)

    # 부산은 서울보다 동쪽, 남쪽
    assert busan.nx > seoul.nx
    assert busan.ny < seoul.ny
