from trip_planner.core.profile_extractor import ProfileExtractor
from trip_planner.core.state_manager import InMemoryUserMemoryStore
from trip_planner.models.user_profile import UserProfile
from trip_planner.utils.transcript import normalize_messages


def _history(*texts):
    return normalize_messages([{"role": "user", "content": t} for t in texts])


def test_extracts_lists_and_scalars():
    updates = ProfileExtractor().extract(_history("A relaxing beach trip with my family", "I love museums and wine"))
    assert updates["travel_style"] == ["beach", "relaxing"]
    assert updates["companionship"] == "family"
    assert updates["liked_activities"] == ["wine tasting", "museums"]


def test_repeated_passes_never_remove_or_duplicate_tags():
    extractor = ProfileExtractor()
    profile = UserProfile()
    history = _history("Hiking adventure, business class please")

    extractor.update(profile, history)
    first = profile.model_dump()
    extractor.update(profile, history)
    extractor.update(profile, _history("just a quick question"))

    assert profile.model_dump() == first
    assert profile.travel_style == ["active"]
    assert profile.liked_activities == ["hiking"]
    assert profile.flight_class == "business"


def test_assistant_text_is_ignored():
    history = normalize_messages([{"role": "assistant", "content": "Do you like beach or city trips?"}])
    assert ProfileExtractor().extract(history) == {}


def test_store_mutate_is_monotonic_and_returns_copies():
    store = InMemoryUserMemoryStore()
    extractor = ProfileExtractor()

    store.mutate("u1", lambda m: extractor.update(m.profile, _history("beach")))
    snapshot = store.mutate("u1", lambda m: extractor.update(m.profile, _history("museum")))
    snapshot.profile.travel_style.clear()

    stored = store.get("u1")
    assert stored.profile.travel_style == ["beach"]
    assert stored.profile.liked_activities == ["museums"]
