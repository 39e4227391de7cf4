"""Tests for spatial entity models and the model builder."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from parcelmap.core.types import CompletionStatus, LotStatus
from parcelmap.spatial.builder import SpatialModelBuilder
from parcelmap.spatial.models import STRICT_FIELDS, Block, Lot, LotInfo, MapBounds, SpatialModel, lot_key

RING = [(0, 0), (10, 0), (10, 10), (0, 10)]


def make_lot(block: str, number: str, center=None, **info) -> Lot:
    lot_id = lot_key(block, number)
    return Lot(
        id=lot_id,
        block=block,
        lot_number=number,
        coordinates=RING,
        center=center,
        info=LotInfo(id=lot_id, block=block, lot=number, **info),
    )


class TestLotInfo:
    def test_defaults(self):
        info = LotInfo(id="1-1", block="1", lot="1")
        assert info.notes == ""
        assert info.created_at.tzinfo is not None
        assert info.aliases == []

    def test_extra_attributes_kept_verbatim(self):
        info = LotInfo(id="1-1", block="1", lot="1", tipo="Comercial", custom={"a": 1})
        assert info.model_extra == {"tipo": "Comercial", "custom": {"a": 1}}

    def test_numeric_fields_parsed_leniently(self):
        info = LotInfo(id="1-1", block="1", lot="1", area="250.5", price="n/a", frontage=12)
        assert info.area == 250.5
        assert info.price == "n/a"
        assert info.frontage == 12

    def test_status_parsed_leniently(self):
        assert LotInfo(id="1-1", block="1", lot="1", status="vendido").status == LotStatus.SOLD
        assert LotInfo(id="1-1", block="1", lot="1", status="weird").status == "weird"

    def test_unparsed_values_kept_as_given(self):
        info = LotInfo(
            id="1-1", block="1", lot="1",
            status="Vendido", area="1.234,56", is_available="maybe", documents="see folder",
        )
        assert info.status == "Vendido"
        assert info.area == "1.234,56"
        assert info.is_available == "maybe"
        assert info.documents == "see folder"

    def test_strict_fields_reject_unparsed_values(self):
        data = {"id": "1-1", "block": "1", "lot": "1", "price": "abc", "status": "Vendido"}
        with pytest.raises(ValidationError, match="price"):
            LotInfo.model_validate(data, context={STRICT_FIELDS: {"price"}})
        info = LotInfo.model_validate({**data, "price": "10"}, context={STRICT_FIELDS: {"price"}})
        assert info.price == 10
        assert info.status == "Vendido"

    def test_text_fields_stringified(self):
        info = LotInfo(id="1-1", block="1", lot="1", owner=42, notes=None)
        assert info.owner == "42"
        assert info.notes == ""

    def test_flag_and_lists(self):
        info = LotInfo(id="1-1", block="1", lot="1", is_available="sim", aliases="15", documents="x")
        assert info.is_available is True
        assert info.aliases == ["15"]
        assert info.documents == "x"

    def test_completion_status(self):
        assert LotInfo(id="a", block="a", lot="a").completion_status == CompletionStatus.EMPTY
        partial = LotInfo(id="a", block="a", lot="a", owner="Jane", notes="  ")
        assert partial.completion_status == CompletionStatus.PARTIAL
        unparsed = LotInfo(id="a", block="a", lot="a", owner="Jane", area="1.234,56", price="?")
        assert unparsed.completion_status == CompletionStatus.PARTIAL
        complete = LotInfo(id="a", block="a", lot="a", owner="Jane", area=300, price=1000)
        assert complete.completion_status == CompletionStatus.COMPLETE


class TestLot:
    def test_requires_three_points(self):
        with pytest.raises(ValidationError):
            Lot(
                id="1-1", block="1", lot_number="1",
                coordinates=[(0, 0), (1, 1)],
                info=LotInfo(id="1-1", block="1", lot="1"),
            )

    def test_lot_alias(self):
        lot = Lot.model_validate({
            "id": "1-1", "block": "1", "lot": "1",
            "coordinates": RING,
            "info": {"id": "1-1", "block": "1", "lot": "1"},
        })
        assert lot.lot_number == "1"
        assert lot.model_dump(by_alias=True)["lot"] == "1"

    def test_area_is_numeric_only(self):
        assert make_lot("1", "1", area="300").area == 300
        assert make_lot("1", "1", area="1.234,56").area is None
        assert make_lot("1", "1", area=True).area is None

    def test_winding_preserved(self):
        reversed_ring = list(reversed(RING))
        lot = make_lot("1", "1").model_copy(update={"coordinates": reversed_ring})
        assert lot.coordinates == reversed_ring


class TestSpatialModel:
    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError):
            SpatialModel(blocks=[
                Block(id="1", name="Quadra 1", lots=[make_lot("1", "1")]),
                Block(id="1b", name="Other", lots=[make_lot("1", "1")]),
            ])

    def test_lookup_and_counts(self):
        model = SpatialModel(blocks=[
            Block(id="1", name="Quadra 1", lots=[make_lot("1", "1"), make_lot("1", "2")]),
            Block(id="2", name="Quadra 2", lots=[make_lot("2", "1")]),
        ])
        assert model.lot_count == 3
        assert model.get_lot("2-1").block == "2"
        assert model.get_lot("9-9") is None
        assert model.get_block("1").name == "Quadra 1"
        stats = model.statistics()
        assert (stats.total_blocks, stats.total_lots) == (2, 3)
        assert stats.completion == {
            CompletionStatus.EMPTY: 3, CompletionStatus.PARTIAL: 0, CompletionStatus.COMPLETE: 0,
        }

    def test_replace_lot_returns_new_model(self):
        model = SpatialModel(blocks=[
            Block(id="1", name="Quadra 1", lots=[make_lot("1", "1"), make_lot("1", "2")]),
        ])
        edited = make_lot("1", "2", owner="Jane")
        new_model = model.replace_lot(edited)
        assert new_model is not model
        assert new_model.get_lot("1-2").info.owner == "Jane"
        assert model.get_lot("1-2").info.owner is None
        assert [lot.id for lot in new_model.iter_lots()] == ["1-1", "1-2"]

    def test_replace_unknown_lot(self):
        with pytest.raises(KeyError):
            SpatialModel().replace_lot(make_lot("1", "1"))

    def test_to_external_shape(self):
        model = SpatialModel(blocks=[
            Block(id="1", name="Quadra 1", lots=[make_lot("1", "1", center=(5, 5))], center=(5, 5)),
        ])
        data = model.to_external()
        lot = data["blocks"][0]["lots"][0]
        assert set(lot) == {"id", "block", "lot", "coordinates", "center", "info"}
        assert lot["coordinates"][0] == [0, 0]
        assert data["bounds"]["max_x"] == 1024

    def test_bounds_are_fixed(self):
        bounds = MapBounds()
        assert (bounds.width, bounds.height) == (1024, 747)


class TestSpatialModelBuilder:
    def test_insertion_order_and_sorting(self):
        builder = SpatialModelBuilder()
        for block in ("10", "2"):
            builder.add_block(block, f"Quadra {block}")
            builder.add_lot(make_lot(block, "1"))
        assert [b.id for b in builder.build().blocks] == ["10", "2"]
        assert [b.id for b in builder.build(sort_key=int).blocks] == ["2", "10"]

    def test_block_centers(self):
        builder = SpatialModelBuilder()
        builder.add_block("1", "Quadra 1")
        builder.add_block("2", "Empty")
        builder.add_lot(make_lot("1", "1", center=(5, 5)))
        builder.add_lot(make_lot("1", "2", center=(25, 5)))
        model = builder.build(with_block_centers=True)
        assert model.get_block("1").center == (15, 5)
        assert model.get_block("2").center == (0, 0)
        assert builder.build().get_block("1").center is None

    def test_last_write_wins(self, caplog):
        builder = SpatialModelBuilder()
        builder.add_block("1", "Quadra 1")
        builder.add_lot(make_lot("1", "1", owner="first"))
        builder.add_lot(make_lot("1", "2"))
        with caplog.at_level(logging.WARNING, logger="parcelmap.spatial.builder"):
            builder.add_lot(make_lot("1", "1", owner="second"))
        model = builder.build()
        assert [lot.id for lot in model.iter_lots()] == ["1-1", "1-2"]
        assert model.get_lot("1-1").info.owner == "second"
        assert "1-1" in caplog.text

    def test_unknown_block(self):
        with pytest.raises(KeyError):
            SpatialModelBuilder().add_lot(make_lot("1", "1"))

    def test_each_build_is_fresh(self):
        builder = SpatialModelBuilder()
        builder.add_block("1", "Quadra 1")
        builder.add_lot(make_lot("1", "1"))
        first = builder.build()
        builder.add_lot(make_lot("1", "2"))
        assert first.lot_count == 1
        assert builder.build().lot_count == 2

