"""
Property-based tests for request matching.

Key properties:
- a request carrying every recorded key/value matches, whatever extra keys
  it adds
- ignoring more keys never turns a match into a miss
- a recorded key the request lacks (and that is not ignored) always misses
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from pubsub_harness.replay.cassette import IncomingRequest, RecordedInteraction
from pubsub_harness.replay.matcher import interaction_matches

query_keys = st.text(
    alphabet=st.characters(whitelist_categories=("Ll", "Nd")), min_size=1, max_size=8
)
query_values = st.text(max_size=12)
queries = st.dictionaries(query_keys, query_values, max_size=6)


@st.composite
def recorded_and_request(draw):
    """A recorded interaction and a request that carries all of its query."""
    recorded_query = draw(queries)
    extra = draw(queries)
    request_query = {**extra, **recorded_query}
    recorded = RecordedInteraction(
        method="GET", host="ps.pndsn.com", path="/p", query=recorded_query
    )
    request = IncomingRequest(
        method="GET", host="ps.pndsn.com", path="/p", query=request_query
    )
    return recorded, request


@given(recorded_and_request())
@settings(max_examples=200)
def test_superset_request_matches(pair) -> None:
    recorded, request = pair
    assert interaction_matches(recorded, request)


@given(
    recorded_query=queries,
    request_query=queries,
    ignore=st.frozensets(query_keys, max_size=4),
    more=st.frozensets(query_keys, max_size=4),
)
@settings(max_examples=200)
def test_ignoring_more_keys_is_monotonic(
    recorded_query, request_query, ignore, more
) -> None:
    recorded = RecordedInteraction(
        method="GET", host="h", path="/p", query=recorded_query
    )
    request = IncomingRequest(method="GET", host="h", path="/p", query=request_query)

    if interaction_matches(recorded, request, ignore):
        assert interaction_matches(recorded, request, ignore | more)


@given(recorded_query=queries, ignore=st.frozensets(query_keys, max_size=4))
@settings(max_examples=200)
def test_ignoring_every_recorded_key_always_matches(recorded_query, ignore) -> None:
    recorded = RecordedInteraction(
        method="GET", host="h", path="/p", query=recorded_query
    )
    request = IncomingRequest(method="GET", host="h", path="/p", query={})

    assert interaction_matches(recorded, request, ignore | set(recorded_query))


@given(recorded_and_request(), st.data())
@settings(max_examples=200)
def test_missing_recorded_key_misses(pair, data) -> None:
    recorded, request = pair
    if not recorded.query:
        return
    dropped = data.draw(st.sampled_from(sorted(recorded.query)))
    reduced = IncomingRequest(
        method=request.method,
        host=request.host,
        path=request.path,
        query={k: v for k, v in request.query.items() if k != dropped},
    )

    assert not interaction_matches(recorded, reduced)
    assert interaction_matches(recorded, reduced, {dropped})
