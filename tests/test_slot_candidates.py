"""Hard filters and per-slot shortlist construction."""

from logic.hard_filters import FilterContext, RejectionReason, apply_hard_filters, evaluate, rejection_summary
from logic.shortlist import build_slot_shortlists, interleave_by_brand
from models.profile import StyleProfile, required_slots
from models.taxonomy import Slot


def _context(profile: StyleProfile, slot: Slot = Slot.TOP, max_price: float = 1000.0, **kwargs) -> FilterContext:
    return FilterContext(profile=profile, slot=slot, max_price=max_price, currency="EUR", **kwargs)


def test_required_slots_follow_weather_and_rain() -> None:
    assert required_slots(StyleProfile(budget=100, temperature="cold")) == [
        Slot.OUTERWEAR,
        Slot.TOP,
        Slot.BOTTOM,
        Slot.SHOES,
    ]
    assert required_slots(StyleProfile(budget=100, temperature="hot")) == [Slot.TOP, Slot.BOTTOM, Slot.SHOES]
    assert required_slots(StyleProfile(budget=100, temperature="mild", rain=True))[0] == Slot.OUTERWEAR


def test_each_candidate_is_rejected_for_first_failing_reason(make_candidate, mild_profile) -> None:
    context = _context(mild_profile, max_price=100.0, excluded_keys=frozenset({"acme:used"}))

    assert evaluate(make_candidate("shoe", Slot.SHOES, 50), context).reason == RejectionReason.SLOT_MISMATCH
    used = make_candidate("used", Slot.TOP, 500, exclusion_key="acme:used")
    assert evaluate(used, context).reason == RejectionReason.ALREADY_USED
    assert evaluate(make_candidate("usd", Slot.TOP, 20, currency="USD"), context).reason == (
        RejectionReason.CURRENCY_MISMATCH
    )
    assert evaluate(make_candidate("dear", Slot.TOP, 150), context).reason == RejectionReason.PRICE_OUT_OF_RANGE
    assert evaluate(make_candidate("gone", Slot.TOP, 20, availability="out of stock"), context).reason == (
        RejectionReason.OUT_OF_STOCK
    )
    assert evaluate(make_candidate("ok", Slot.TOP, 20, availability="in stock"), context) is None


def test_child_items_are_only_filtered_for_adults(make_candidate) -> None:
    kids_top = make_candidate("kid", Slot.TOP, 20, category="Girls tops")
    adult = StyleProfile(budget=100, age=30)
    teen = StyleProfile(budget=100, age=12)

    assert evaluate(kids_top, _context(adult)).reason == RejectionReason.CHILD_ITEM
    assert evaluate(kids_top, _context(teen)) is None


def test_gender_filter_is_asymmetric(make_candidate) -> None:
    mens = make_candidate("m", Slot.TOP, 20, category="Men shirts")
    unisex = make_candidate("u", Slot.TOP, 20, category="Men & Women shirts")
    womens = make_candidate("w", Slot.TOP, 20, category="Women shirts")
    female = StyleProfile(budget=100, gender="female")
    male = StyleProfile(budget=100, gender="male")

    assert evaluate(mens, _context(female)).reason == RejectionReason.OPPOSITE_GENDER
    assert evaluate(unisex, _context(female)) is None
    assert evaluate(womens, _context(male)).reason == RejectionReason.OPPOSITE_GENDER
    assert evaluate(unisex, _context(male)).reason == RejectionReason.OPPOSITE_GENDER
    assert evaluate(mens, _context(male)) is None


def test_fit_preference_rejects_conflicting_cuts(make_candidate) -> None:
    baggy = make_candidate("b", Slot.BOTTOM, 40, title="Baggy jeans")
    slim = make_candidate("s", Slot.BOTTOM, 40, title="Slim jeans")
    fitted = StyleProfile(budget=100, fit_preference="fitted")

    assert evaluate(baggy, _context(fitted, slot=Slot.BOTTOM)).reason == RejectionReason.FIT_CONFLICT
    assert evaluate(slim, _context(fitted, slot=Slot.BOTTOM)) is None


def test_rejection_tallies_drop_slot_mismatches(make_candidate, mild_profile) -> None:
    pool = [make_candidate("a", Slot.TOP, 20), make_candidate("b", Slot.SHOES, 20), make_candidate("c", Slot.TOP, 900)]

    result = apply_hard_filters(pool, _context(mild_profile, max_price=100.0))

    assert [candidate.id for candidate in result.items] == ["a"]
    assert rejection_summary({"top": result.rejections}) == {"top": {"price_out_of_range": 1}}


def test_brand_interleave_cycles_cheapest_first(make_candidate) -> None:
    pool = [
        make_candidate("a1", Slot.TOP, 10, brand="A"),
        make_candidate("a2", Slot.TOP, 11, brand="A"),
        make_candidate("a3", Slot.TOP, 12, brand="A"),
        make_candidate("b1", Slot.TOP, 15, brand="B"),
        make_candidate("c1", Slot.TOP, 20, brand="C"),
    ]

    ordered = [candidate.id for candidate in interleave_by_brand(pool, limit=10)]

    assert ordered == ["a1", "b1", "c1", "a2", "a3"]
    assert len(interleave_by_brand(pool, limit=2)) == 2


def test_shortlist_ceiling_tracks_simulated_budget(make_candidate) -> None:
    profile = StyleProfile(budget=300, temperature="mild")
    pool = [
        make_candidate("top", Slot.TOP, 50),
        make_candidate("bottom", Slot.BOTTOM, 100),
        make_candidate("bottom-dear", Slot.BOTTOM, 200),
        make_candidate("shoes", Slot.SHOES, 200),
    ]

    shortlists = build_slot_shortlists(pool, profile, required_slots(profile))

    assert shortlists.max_price_by_slot == {Slot.TOP: 150.0, Slot.BOTTOM: 187.5, Slot.SHOES: 225.0}
    assert [candidate.id for candidate in shortlists.candidates_by_slot[Slot.BOTTOM]] == ["bottom"]
    assert shortlists.empty_slots() == []
    assert shortlists.find(Slot.SHOES, "shoes") is not None
    assert shortlists.find(Slot.SHOES, "top") is None


def test_rain_without_outerwear_leaves_an_empty_shortlist(make_candidate) -> None:
    profile = StyleProfile(budget=300, temperature="mild", rain=True)
    pool = [
        make_candidate("top", Slot.TOP, 50),
        make_candidate("bottom", Slot.BOTTOM, 60),
        make_candidate("shoes", Slot.SHOES, 70),
    ]

    shortlists = build_slot_shortlists(pool, profile, required_slots(profile))

    assert shortlists.empty_slots() == [Slot.OUTERWEAR]
    assert shortlists.candidates_by_slot[Slot.TOP]
