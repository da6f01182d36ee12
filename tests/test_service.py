"""End-to-end tests for one player's PlacesOfInterest session."""

import pytest

from places_of_interest.config import PlacesConfig
from places_of_interest.core.calendar import FixedCalendar
from places_of_interest.core.place import Place, Vec3
from places_of_interest.core.records import PlaceRecord, TagRecord
from places_of_interest.core.tags import Tag, TagName
from places_of_interest.service import PlacesOfInterest
from places_of_interest.storage.importer import ExistingPlaceAction
from places_of_interest.storage.store import InMemoryStoreProvider

PLAYER = "player-1"
TODAY = 100
PLAYER_POSITION = Vec3(x=0, y=64, z=0)


def make_place(x: float, *tags: str | Tag, y: float = 64, z: float = 0) -> Place:
    return Place(
        position=(x, y, z),
        tags=[Tag(name=tag) if isinstance(tag, str) else tag for tag in tags],
    )


def tag_set(*values: str) -> set[TagName]:
    return {TagName(value) for value in values}


def seed(provider: InMemoryStoreProvider, *places: Place) -> None:
    provider.save(PLAYER, list(places))


@pytest.fixture
def provider() -> InMemoryStoreProvider:
    return InMemoryStoreProvider()


@pytest.fixture
def calendar() -> FixedCalendar:
    return FixedCalendar(current_day=TODAY, days_per_month=9)


@pytest.fixture
def session(provider: InMemoryStoreProvider, calendar: FixedCalendar) -> PlacesOfInterest:
    return PlacesOfInterest(PLAYER, PLAYER_POSITION, provider, calendar)


# ============================================================================
# Tagging Tests
# ============================================================================


class TestTagHere:
    """Tests for tagging the player's current spot."""

    def test_creates_place(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test tagging an empty spot creates and saves a place."""
        result = session.tag_here("copper")

        assert result.created
        assert result.counts.added == 1
        saved = provider.load(PLAYER)
        assert len(saved) == 1
        assert saved[0].tag_names == [TagName("copper")]
        assert saved[0].position == PLAYER_POSITION

    def test_nothing_to_add(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test an empty spot with only exclusions has nothing to do."""
        result = session.tag_here("-copper")

        assert result.nothing_to_do
        assert provider.load(PLAYER) == []

    def test_empty_query_on_existing_place(
        self, session: PlacesOfInterest, provider: InMemoryStoreProvider
    ) -> None:
        """Test an empty query leaves an existing place alone."""
        seed(provider, make_place(1, "copper"))

        result = session.tag_here("")

        assert result.nothing_to_do
        assert not result.created

    def test_adds_to_existing_place(
        self, session: PlacesOfInterest, provider: InMemoryStoreProvider
    ) -> None:
        """Test a new tag joins the place already at the spot."""
        seed(provider, make_place(1, "copper"))

        result = session.tag_here("tin")

        assert result.counts.changed == 1
        saved = provider.load(PLAYER)
        assert len(saved) == 1
        assert saved[0].tag_names == [TagName("copper"), TagName("tin")]

    def test_removing_last_tag_deletes_place(
        self, session: PlacesOfInterest, provider: InMemoryStoreProvider
    ) -> None:
        """Test removing the only tag deletes the place."""
        seed(provider, make_place(1, "copper"))

        result = session.tag_here("-copper")

        assert result.counts.removed == 1
        assert provider.load(PLAYER) == []

    def test_expiry_uses_calendar(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test offsets are measured with the session's calendar."""
        session.tag_here("copper 1m")
        session.tag_here("tin 3d")

        (saved,) = provider.load(PLAYER)
        assert saved.tags == [
            Tag(name="copper", end_day=TODAY + 9),
            Tag(name="tin", end_day=TODAY + 3),
        ]

    def test_ignores_places_in_other_cells(
        self, session: PlacesOfInterest, provider: InMemoryStoreProvider
    ) -> None:
        seed(provider, make_place(20, "copper"))

        result = session.tag_here("tin")

        assert result.created
        assert len(provider.load(PLAYER)) == 2


# ============================================================================
# Search Tests
# ============================================================================


class TestFindNearest:
    """Tests for finding the nearest matching place."""

    def test_reports_distances(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test the nearest match is reported with rounded distances."""
        seed(
            provider,
            make_place(30, "copper", y=74, z=40),
            make_place(100, "copper"),
            make_place(5, "iron"),
        )

        nearest = session.find_nearest("copper")

        assert nearest is not None
        assert nearest.horizontal_distance == 50
        assert nearest.vertical_distance == 10
        assert nearest.active_tag_names == [TagName("copper")]

    def test_without_match(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        seed(provider, make_place(5, "iron"))
        assert session.find_nearest("gold") is None

    def test_skips_hidden_places(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test hidden places are found only when asked for."""
        hidden = make_place(1, "copper", "hidden")
        visible = make_place(50, "copper")
        seed(provider, hidden, visible)

        found = session.find_nearest("copper")
        assert found is not None and found.place.id == visible.id

        found = session.find_nearest("copper hidden")
        assert found is not None and found.place.id == hidden.id

    def test_reserved_names_find_each_other(
        self, session: PlacesOfInterest, provider: InMemoryStoreProvider
    ) -> None:
        """Test asking for ``ignored`` finds a place tagged ``excluded``."""
        excluded = make_place(3, "copper", "excluded")
        seed(provider, excluded)

        found = session.find_nearest("ignored")

        assert found is not None and found.place.id == excluded.id


class TestTagsAround:
    """Tests for listing tags of nearby places."""

    def test_collects_tags(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test every active tag in range is listed."""
        seed(
            provider,
            make_place(0, "copper", "tin"),
            make_place(10, "copper", "gold"),
            make_place(20, "silver"),
        )

        assert session.tags_around("", 100) == tag_set("copper", "tin", "gold", "silver")

    def test_respects_radius(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        seed(provider, make_place(0, "nearby"), make_place(51, "faraway"))
        assert session.tags_around("", 50) == tag_set("nearby")

    def test_non_positive_radius_uses_fallback(
        self, session: PlacesOfInterest, provider: InMemoryStoreProvider
    ) -> None:
        """Test a zero radius falls back to the configured radius."""
        seed(provider, make_place(1, "nearby"), make_place(20, "faraway"))
        assert session.tags_around("", 0) == tag_set("nearby")

    def test_with_only_a_filter(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test ``-> tag`` filters the tags of every place."""
        seed(
            provider,
            make_place(0, "copper", "ore"),
            make_place(10, "tin", "ore"),
            make_place(20, "village"),
        )

        assert session.tags_around("-> ore", 100) == tag_set("ore")
        assert session.tags_around("-> -ore", 100) == tag_set("copper", "tin", "village")

    def test_search_and_filter(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test the search half picks places and the filter half picks tags."""
        seed(
            provider,
            make_place(0, "copper", "ore", "processed"),
            make_place(10, "tin", "ore"),
            make_place(20, "village"),
        )

        assert session.tags_around("ore -> -ore", 100) == tag_set("copper", "processed", "tin")

    def test_without_arrow_filters_by_search(
        self, session: PlacesOfInterest, provider: InMemoryStoreProvider
    ) -> None:
        """Test text without an arrow both searches and filters."""
        seed(
            provider,
            make_place(0, "mine", "copper", "processed"),
            make_place(10, "mine", "iron"),
            make_place(20, "copper", "raw"),
        )

        assert session.tags_around("mine copper", 100) == tag_set("mine", "copper")

    def test_with_exclusion(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        seed(
            provider,
            make_place(0, "mine", "copper"),
            make_place(10, "mine", "depleted"),
            make_place(20, "village"),
        )

        assert session.tags_around("mine -depleted", 100) == tag_set("mine")


class TestPlacesAround:
    """Tests for listing nearby matching places."""

    def test_places_around(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test only matching places within the radius are listed."""
        seed(provider, make_place(5, "copper"), make_place(8, "tin"), make_place(500, "copper"))

        places = session.places_around("copper", 50)

        assert [place.position.x for place in places] == [5]


# ============================================================================
# Editing Tests
# ============================================================================


class TestEditPlaces:
    """Tests for search-and-update edits."""

    def test_edits_nearby(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test matching places in range are edited and emptied ones removed."""
        seed(
            provider,
            make_place(0, "copper"),
            make_place(5, "copper", "ore"),
            make_place(100, "copper"),
        )

        result = session.edit_places("copper -> -copper", 16)

        assert (result.searched, result.matched) == (2, 2)
        assert (result.counts.removed, result.counts.changed) == (1, 1)
        saved = provider.load(PLAYER)
        assert [[name.value for name in place.tag_names] for place in saved] == [["ore"], ["copper"]]

    def test_edits_everywhere(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test a zero radius edits places at any distance."""
        seed(provider, make_place(0, "copper"), make_place(1000, "copper", z=1000))

        result = session.edit_places("copper -> tin", 0)

        assert result.matched == 2
        assert all(
            place.tag_names == [TagName("copper"), TagName("tin")] for place in provider.load(PLAYER)
        )

    def test_never_creates(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test an edit without matches creates nothing."""
        seed(provider, make_place(0, "copper"))

        result = session.edit_places("gold -> silver")

        assert result.matched == 0
        assert result.counts.total == 0
        assert len(provider.load(PLAYER)) == 1

    def test_default_radius(self, provider: InMemoryStoreProvider, calendar: FixedCalendar) -> None:
        """Test the configured edit radius applies when none is given."""
        session = PlacesOfInterest(
            PLAYER, PLAYER_POSITION, provider, calendar, PlacesConfig(edit_search_radius=4)
        )
        seed(provider, make_place(2, "copper"), make_place(6, "copper"))

        assert session.edit_places("copper -> tin").matched == 1


# ============================================================================
# Import and Clear Tests
# ============================================================================


class TestImportAndClear:
    """Tests for importing and clearing a player's places."""

    def test_import_places(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test records are merged into the player's places and saved."""
        seed(provider, make_place(1, "old"))

        result = session.import_places(
            [
                PlaceRecord(x=2, y=64, z=1, tags=[TagRecord(name="new")]),
                PlaceRecord(x=300, y=64, z=0, tags=[TagRecord(name="far")]),
            ],
            ExistingPlaceAction.REPLACE,
        )

        assert (result.added, result.changed) == (1, 1)
        saved = provider.load(PLAYER)
        assert [place.tag_names for place in saved] == [[TagName("new")], [TagName("far")]]

    def test_clear(self, session: PlacesOfInterest, provider: InMemoryStoreProvider) -> None:
        """Test clearing removes every place of the player."""
        seed(provider, make_place(1, "copper"))

        session.clear()

        assert provider.load(PLAYER) == []
        assert len(session.store) == 0
