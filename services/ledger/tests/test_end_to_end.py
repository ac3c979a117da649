"""
END-TO-END: one thread from first planting to a grafted successor.

All services share one session and one clock, the way a request does.
"""
from infrastructure.garden_store import GardenStore
from timeline import EventType, build_timeline


class TestGrowthCycle:

    def test_plant_harvest_graft(self, lifecycle, ledger, store, clock):
        """
        SCENARIO: soil=100; plant 1m/firm, harvest with 4, graft 1w/fertile
                  from the harvested sprout
        EXPECTED: soil 100 -> 80 -> 75; timeline newest first:
                  successor start, graft-origin, first completion, first start
        """
        assert ledger.available_soil() == 100

        first = lifecycle.graft("twig-health", "leaf-running", "Run twice a week", "1m", "firm")
        assert ledger.available_soil() == 80

        clock.advance(days=30)
        lifecycle.complete(first.id, 4, "Mostly kept it")

        clock.advance(hours=2)
        second = lifecycle.graft(
            "twig-health", "leaf-running", "Run three times a week", "1w", "fertile",
            origin_id=first.id,
        )
        assert ledger.available_soil() == 75

        events = build_timeline(store.list_sprouts("twig-health", "leaf-running"))

        assert [(e.type, e.sprout_id) for e in events] == [
            (EventType.START, second.id),
            (EventType.GRAFT_ORIGIN, second.id),
            (EventType.COMPLETION, first.id),
            (EventType.START, first.id),
        ]
        assert events[1].data["grafted_from_title"] == "Run twice a week"
        assert events[2].data["result"] == 4
        assert events[2].data["is_success"] is True

    def test_state_survives_a_new_session(self, session_factory, clock):
        """
        SCENARIO: graft in one session, read everything back in another
        EXPECTED: balances, sprout and thread all come back from storage
        """
        from sprout_lifecycle_service import SproutLifecycleService

        writer = session_factory()
        try:
            lifecycle = SproutLifecycleService(GardenStore(writer, clock))
            sprout = lifecycle.graft("twig-health", "leaf-running", "Read daily", "2w", "firm")
            sprout_id = sprout.id
        finally:
            writer.close()

        reader = session_factory()
        try:
            store = GardenStore(reader, clock)
            state = store.ledger_state()
            stored = store.get_sprout(sprout_id)

            assert state.soil_available == state.soil_capacity - 12
            assert stored.state == "active"
            assert stored.created_at == clock.now()
            assert store.load_thread("twig-health").leaves[0].id == "leaf-running"
        finally:
            reader.close()
