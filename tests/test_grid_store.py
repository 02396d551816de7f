"""
Grid store tests: SQLite test database.

Tests:
1-3. Reads return engine-shaped dicts in binding order
4-6. save_grid is all-or-nothing, duplicates rejected
7-9. delete_grid, update_cell, update_cell read errors
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from serramenti import models
from serramenti.errors import GridAlreadyExists, PersistenceFailure
from serramenti.grid_engine import GridEngine
from serramenti.grid_store import GridStore


CONFIG = {"height_min": 100, "height_max": 200, "width_min": 100, "width_max": 150, "increment": 50}


def _seed(db):
    """Series S100 with Telaio + Anta costs, frame type Battente with rules for both."""
    telaio = models.Profile(name="Telaio")
    anta = models.Profile(name="Anta")
    fermavetro = models.Profile(name="Fermavetro")
    db.add_all([telaio, anta, fermavetro])
    db.flush()

    series = models.Series(name="S100")
    db.add(series)
    db.flush()
    db.add(models.SeriesProfileCost(series_id=series.id, profile_id=anta.id, cost_per_meter=8.0,
                                    bar_length=6.5, scrap_percentage=3.0, min_reusable_length=0.4))
    db.add(models.SeriesProfileCost(series_id=series.id, profile_id=telaio.id, cost_per_meter=12.0,
                                    bar_length=6.0, scrap_percentage=5.0, min_reusable_length=0.5))

    frame_type = models.FrameType(label="Battente 1 Anta")
    db.add(frame_type)
    db.flush()
    db.add(models.FrameTypeProfileRule(frame_type_id=frame_type.id, profile_id=telaio.id,
                                       height_multiplier=2.0, width_multiplier=2.0))
    db.add(models.FrameTypeProfileRule(frame_type_id=frame_type.id, profile_id=fermavetro.id,
                                       height_multiplier=2.0, width_multiplier=2.0))
    db.add(models.FrameTypeProfileRule(frame_type_id=frame_type.id, profile_id=anta.id,
                                       height_multiplier=2.0, width_multiplier=2.0))
    db.commit()
    return series, frame_type


def test_profiles_for_series_in_binding_order(db):
    series, _ = _seed(db)
    profiles = GridStore(db).get_profiles_for_series(series.id)
    assert [p["profile_name"] for p in profiles] == ["Anta", "Telaio"]
    assert profiles[0] == {
        "profile_id": profiles[0]["profile_id"],
        "profile_name": "Anta",
        "cost_per_meter": 8.0,
        "bar_length": 6.5,
        "scrap_percentage": 3.0,
        "min_reusable_length": 0.4,
    }


def test_rules_for_frame_type(db):
    _, frame_type = _seed(db)
    rules = GridStore(db).get_rules_for_frame_type(frame_type.id)
    assert len(rules) == 3
    assert all(set(r) == {"profile_id", "height_multiplier", "width_multiplier"} for r in rules)


def test_unknown_ids_return_empty_lists(db):
    store = GridStore(db)
    assert store.get_profiles_for_series(999) == []
    assert store.get_rules_for_frame_type(999) == []


def test_save_grid_stores_all_cells(db):
    series, frame_type = _seed(db)
    store = GridStore(db)
    cells = GridEngine(store).calculate_grid(series.id, frame_type.id, CONFIG)
    grid = store.save_grid(series.id, frame_type.id, cells, CONFIG)

    assert grid.id is not None
    assert len(grid.cells) == 6
    assert grid.increment == 50
    first = grid.cells[0]
    assert (first.height, first.width) == (100, 100)
    assert first.total_cost == cells[0]["total_cost"]
    assert first.materials_json == cells[0]["materials"]
    assert store.grid_exists(series.id, frame_type.id)


def test_duplicate_grid_rejected(db):
    series, frame_type = _seed(db)
    store = GridStore(db)
    cells = GridEngine(store).calculate_grid(series.id, frame_type.id, CONFIG)
    store.save_grid(series.id, frame_type.id, cells, CONFIG)

    with pytest.raises(GridAlreadyExists):
        store.save_grid(series.id, frame_type.id, cells, CONFIG)
    assert db.query(models.PriceGrid).count() == 1
    assert db.query(models.GridCell).count() == 6


def test_failed_save_stores_nothing(db, monkeypatch):
    series, frame_type = _seed(db)
    store = GridStore(db)
    cells = GridEngine(store).calculate_grid(series.id, frame_type.id, CONFIG)

    def broken_commit():
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(db, "commit", broken_commit)
    with pytest.raises(PersistenceFailure) as exc:
        store.save_grid(series.id, frame_type.id, cells, CONFIG)
    assert isinstance(exc.value.__cause__, SQLAlchemyError)

    monkeypatch.undo()
    assert db.query(models.PriceGrid).count() == 0
    assert db.query(models.GridCell).count() == 0


def test_delete_grid_removes_cells(db):
    series, frame_type = _seed(db)
    store = GridStore(db)
    cells = GridEngine(store).calculate_grid(series.id, frame_type.id, CONFIG)
    store.save_grid(series.id, frame_type.id, cells, CONFIG)

    assert store.delete_grid(series.id, frame_type.id) is True
    assert db.query(models.PriceGrid).count() == 0
    assert db.query(models.GridCell).count() == 0
    assert store.delete_grid(series.id, frame_type.id) is False


def test_update_cell_does_not_rederive(db):
    series, frame_type = _seed(db)
    store = GridStore(db)
    cells = GridEngine(store).calculate_grid(series.id, frame_type.id, CONFIG)
    grid = store.save_grid(series.id, frame_type.id, cells, CONFIG)
    cell_id = grid.cells[0].id

    updated = store.update_cell(cell_id, 199.999)
    assert updated.total_cost == 200.0
    assert updated.manually_edited is True
    assert updated.materials_json == cells[0]["materials"]
    assert store.update_cell(99999, 10.0) is None


def test_update_cell_read_error_is_persistence_failure(db, monkeypatch):
    store = GridStore(db)

    def broken_query(*args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(db, "query", broken_query)
    with pytest.raises(PersistenceFailure) as exc:
        store.update_cell(1, 10.0)
    assert isinstance(exc.value.__cause__, SQLAlchemyError)
