"""Property tests for the event-stream decoder: chunking never changes the result."""

from hypothesis import given
from hypothesis import strategies as st

from kite_agent.stream import decode_stream
from tests.conftest import sse

contents = st.lists(st.text(min_size=0, max_size=20), min_size=0, max_size=10)
cut_points = st.lists(st.integers(min_value=0, max_value=10_000), max_size=20)


def split(body, cuts):
    points = sorted({c % (len(body) + 1) for c in cuts})
    out, prev = [], 0
    for p in points:
        out.append(body[prev:p])
        prev = p
    out.append(body[prev:])
    return out


@given(parts=contents, cuts=cut_points)
def test_any_chunking_yields_the_concatenation(parts, cuts):
    body = sse(*parts)
    assert decode_stream(split(body, cuts)) == "".join(parts)


@given(parts=contents, garbage=st.text(max_size=30), index=st.integers(min_value=0, max_value=10))
def test_malformed_frames_never_lose_valid_content(parts, garbage, index):
    garbage = garbage.replace("\n", " ").replace("\r", " ")
    if garbage.strip() == "[DONE]":
        garbage = "{" + garbage
    frames = [f + "\n" for f in sse(*parts, done=False).decode("utf-8").split("\n") if f]
    frames.insert(min(index, len(frames)), f"data: {garbage}\n")
    assert decode_stream(["".join(frames).encode("utf-8")]) == "".join(parts)
