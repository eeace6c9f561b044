"""Tests for the CircularVisualizer engine."""

import logging
import math

import pytest

from conftest import RecordingSink, make_contacts
from dunbar_rings.layout import Contact, RenderBudget, ViewportState
from dunbar_rings.visualizer import CircularVisualizer


def _visualizer(sink, threshold=100, max_items=50, visible_radius=500, **kwargs):
    return CircularVisualizer(
        sink=sink,
        budget=RenderBudget(threshold=threshold, max_rendered_items=max_items),
        viewport=ViewportState(450, 450, visible_radius),
        **kwargs,
    )


class TestRenderScenarios:
    """End-to-end render passes."""

    def test_five_inner_contacts(self, sink, five_inner):
        """Five inner contacts are all drawn at radius 80."""
        items = _visualizer(sink).render(five_inner)

        assert len(items) == 5
        degrees = [math.degrees(item.angle) for item in items]
        assert degrees == pytest.approx([-90, -18, 54, 126, 198])
        for item in items:
            assert math.hypot(item.x - 450, item.y - 450) == pytest.approx(80)

    def test_single_close_contact(self, sink):
        """One close contact sits at (450, 290)."""
        (item,) = _visualizer(sink).render(make_contacts(1, "close"))
        assert (item.x, item.y) == pytest.approx((450, 290))

    def test_virtualized_keeps_nearest(self, sink, spread_contacts):
        """120 contacts over threshold 100 are culled to the 50 nearest."""
        visualizer = _visualizer(sink)
        items = visualizer.render(spread_contacts)

        assert len(items) == 50
        assert sink.last == items
        rings = [item.ring_id for item in items]
        assert rings.count("inner") == 24
        assert rings.count("close") == 24
        assert rings.count("active") == 2
        assert visualizer.get_performance_metrics().virtualization_active

    def test_virtualized_nothing_in_range(self, sink, spread_contacts):
        """A tiny viewport renders nothing even with budget to spare."""
        items = _visualizer(sink, visible_radius=50).render(spread_contacts)
        assert items == []
        assert sink.last == []

    def test_unknown_ring_contact(self, sink):
        """A contact on an unknown ring is counted nowhere and never drawn."""
        contacts = make_contacts(3) + [Contact(id="x", name="X", ring_id="unknown-ring")]
        visualizer = _visualizer(sink)
        items = visualizer.render(contacts)

        assert "x" not in {item.contact.id for item in items}
        assert sum(visualizer.get_ring_distribution().values()) == 3
        assert "unknown-ring" not in visualizer.get_ring_distribution()
        assert visualizer.get_performance_metrics().dropped_contacts == 1

    def test_empty_contacts(self, sink):
        """No contacts renders an empty set without error."""
        visualizer = _visualizer(sink)
        assert visualizer.render([]) == []
        assert visualizer.render(None) == []
        assert visualizer.get_performance_metrics().total_contacts == 0

    def test_raw_mappings_accepted(self, sink, raw_contacts):
        """Deserialized contacts render; missing names do not fail."""
        items = _visualizer(sink).render(raw_contacts, [{"id": "work", "name": "Work"}])
        assert {item.contact.id for item in items} == {"a", "b", "c", "f"}
        assert sink.last_groups == {"work": "Work"}


class TestRenderMode:
    """Threshold behaviour of render()."""

    def test_just_under_threshold_draws_all(self, sink):
        """99 contacts with threshold 100 are all drawn, even outside the viewport."""
        contacts = make_contacts(99, "acquaintance")
        visualizer = _visualizer(sink, visible_radius=10)
        items = visualizer.render(contacts)

        assert len(items) == 99
        assert visualizer.rendered_items == []
        assert not visualizer.get_performance_metrics().virtualization_active

    def test_at_threshold_capped(self, sink):
        """100 visible contacts with threshold 100 are capped at max_rendered_items."""
        items = _visualizer(sink, max_items=50).render(make_contacts(100, "inner"))
        assert len(items) == 50

    def test_at_threshold_under_cap(self, sink):
        """When the cap exceeds the count, every visible contact is drawn."""
        items = _visualizer(sink, max_items=500).render(make_contacts(100, "inner"))
        assert len(items) == 100

    def test_virtualization_disabled(self, sink, spread_contacts):
        """Disabled virtualization always draws everything."""
        visualizer = _visualizer(sink, virtualization_enabled=False)
        assert len(visualizer.render(spread_contacts)) == 120

    def test_cache_replaced_not_merged(self, sink, spread_contacts):
        """Each virtualized pass replaces the rendered cache."""
        visualizer = _visualizer(sink, max_items=10)
        first = {item.contact.id for item in visualizer.render(spread_contacts)}
        visualizer.update_viewport(450, 50, 1000)
        second = {item.contact.id for item in visualizer.rendered_items}

        assert len(second) == 10
        assert first != second

    def test_duplicate_ids_share_cache_slot(self, sink):
        """The rendered cache is keyed by contact id."""
        visualizer = _visualizer(sink, threshold=1)
        items = visualizer.render([Contact("x", ring_id="inner"), Contact("x", ring_id="close")])
        assert len(items) == 2
        assert len(visualizer.rendered_items) == 1

    def test_full_pass_clears_cache(self, sink, spread_contacts):
        """Switching to the full path clears the rendered cache."""
        visualizer = _visualizer(sink)
        visualizer.render(spread_contacts)
        assert visualizer.rendered_items
        visualizer.render(make_contacts(3))
        assert visualizer.rendered_items == []


class TestUpdateViewport:
    """Tests for update_viewport()."""

    def test_recull_without_regrouping(self, sink, spread_contacts, monkeypatch):
        """Viewport updates rerun culling only."""
        import dunbar_rings.visualizer as visualizer_module

        visualizer = _visualizer(sink)
        visualizer.render(spread_contacts)

        def fail(*args, **kwargs):
            raise AssertionError("grouping recomputed")

        monkeypatch.setattr(visualizer_module, "group_by_ring", fail)
        monkeypatch.setattr(visualizer_module, "layout_rings", fail)

        items = visualizer.update_viewport(450, 450, 50)
        assert items == []
        assert len(sink.draws) == 2

    def test_full_path_does_not_redraw(self, sink, five_inner):
        """Small sets are not redrawn on viewport changes."""
        visualizer = _visualizer(sink)
        visualizer.render(five_inner)
        assert visualizer.update_viewport(0, 0, 10) == []
        assert len(sink.draws) == 1
        assert visualizer.viewport == ViewportState(0, 0, 10)

    def test_layout_independent_of_viewport(self, sink, spread_contacts):
        """Panning moves the cull window, not the contacts."""
        visualizer = _visualizer(sink, max_items=500)
        before = {i.contact.id: (i.x, i.y) for i in visualizer.render(spread_contacts)}
        after = {i.contact.id: (i.x, i.y) for i in visualizer.update_viewport(900, 900, 2000)}
        assert before == after

    def test_bad_values_clamped(self, sink, spread_contacts, caplog):
        """Negative radius and non-positive scale are corrected, not raised."""
        visualizer = _visualizer(sink)
        visualizer.render(spread_contacts)

        with caplog.at_level(logging.WARNING, logger="dunbar_rings"):
            assert visualizer.update_viewport(450, 450, -5, 0) == []
        assert visualizer.viewport == ViewportState(450, 450, 0, 1)
        assert len(sink.draws) == 2
        assert "clamped" in caplog.text

    def test_zero_scale_keeps_previous(self, sink, five_inner):
        """A zero scale on the full path keeps the stored scale."""
        visualizer = _visualizer(sink)
        visualizer.render(five_inner)
        visualizer.update_viewport(0, 0, 10, 2)
        visualizer.update_viewport(0, 0, 10, 0)
        assert visualizer.viewport.scale == 2

    def test_metrics_track_passes(self, sink, spread_contacts):
        """Every draw increments the render count."""
        visualizer = _visualizer(sink)
        visualizer.render(spread_contacts)
        visualizer.update_viewport(450, 450, 100)

        metrics = visualizer.get_performance_metrics()
        assert metrics.render_count == 2
        assert metrics.total_contacts == 120
        assert metrics.rendered_contacts == 24
        assert metrics.last_render_time_ms >= 0


class TestMissingSurface:
    """Configuration errors are logged, never raised."""

    def test_no_sink(self, caplog, five_inner):
        """render() without a sink logs and returns nothing."""
        visualizer = CircularVisualizer()
        with caplog.at_level(logging.ERROR, logger="dunbar_rings"):
            assert visualizer.render(five_inner) == []
        assert "No render target" in caplog.text
        assert visualizer.get_performance_metrics().render_count == 0

    def test_unready_sink_keeps_prior_state(self, caplog, spread_contacts):
        """A sink that is not ready leaves the previous render untouched."""
        sink = RecordingSink()
        visualizer = _visualizer(sink)
        visualizer.render(spread_contacts)
        previous = visualizer.rendered_items

        sink.ready = False
        with caplog.at_level(logging.ERROR, logger="dunbar_rings"):
            assert visualizer.render(make_contacts(3)) == []
        assert "not ready" in caplog.text
        assert visualizer.rendered_items == previous
        assert visualizer.get_performance_metrics().render_count == 1
        assert len(sink.draws) == 1

    def test_unready_sink_keeps_group_filter(self, spread_contacts):
        """A group filter requested while the sink is not ready is not applied."""
        sink = RecordingSink()
        visualizer = _visualizer(sink, max_items=500)
        visualizer.render(spread_contacts)

        sink.ready = False
        assert visualizer.show_group_filter("nobody") == []

        sink.ready = True
        assert len(visualizer.update_viewport(450, 450, 500)) == 120

    def test_attach_sink_later(self, five_inner):
        """A sink attached after construction is used by the next render."""
        visualizer = CircularVisualizer()
        sink = RecordingSink()
        visualizer.attach_sink(sink)
        assert len(visualizer.render(five_inner)) == 5


class TestGroupsAndCapacity:
    """Group filter, distributions and capacity."""

    def test_group_filter(self, sink, raw_contacts):
        """Filtering lays out only group members; distribution stays unfiltered."""
        visualizer = _visualizer(sink)
        visualizer.render(raw_contacts)

        items = visualizer.show_group_filter("family")
        assert {item.contact.id for item in items} == {"a", "f"}
        assert sum(visualizer.get_ring_distribution().values()) == 4

        assert len(visualizer.clear_group_filter()) == 4

    def test_filtered_ring_respaced(self, sink):
        """A filtered ring spreads its remaining members evenly."""
        contacts = [
            Contact(id=str(i), name=f"P{i}", ring_id="inner", groups=("g",) if i % 2 else ())
            for i in range(4)
        ]
        visualizer = _visualizer(sink, group_filter="g")
        items = visualizer.render(contacts)

        assert [item.contact.id for item in items] == ["1", "3"]
        assert math.degrees(items[1].angle - items[0].angle) == pytest.approx(180)

    def test_group_distribution(self, sink, raw_contacts):
        """Group distribution gives counts and percentages per ring."""
        visualizer = _visualizer(sink)
        visualizer.render(raw_contacts)

        distribution = visualizer.get_group_distribution("work")
        assert distribution["active"] == {"count": 1, "percentage": 50}
        assert distribution["casual"] == {"count": 1, "percentage": 50}
        assert distribution["inner"] == {"count": 0, "percentage": 0}

    def test_ring_capacity(self, sink):
        """Capacity reflects the grouped contact count."""
        visualizer = _visualizer(sink)
        visualizer.render(make_contacts(6, "inner"))

        capacity = visualizer.get_ring_capacity("inner")
        assert capacity.current_size == 6
        assert capacity.status == "over"
        with pytest.raises(KeyError):
            visualizer.get_ring_capacity("unknown-ring")

    def test_ring_at_position(self):
        """Hit testing uses the layout center."""
        visualizer = CircularVisualizer(layout_center=(0, 0))
        assert visualizer.ring_at_position(0, -150) == "close"
        assert visualizer.ring_at_position(1000, 0) is None
