"""Every advertised conversion produces a well-formed artifact.

Walks the whole conversion table through the dispatcher with one real input
per source type, so an advertised option can never end in an error.
"""

import pytest
from utils import ProgressRecorder

from convertflow.capabilities import CONVERSION_MAP, mime_type_for
from convertflow.dispatcher import Dispatcher
from convertflow.utils.naming import replace_extension

MAGIC_BYTES = {
    "pdf": b"%PDF",
    "png": b"\x89PNG",
    "jpg": b"\xff\xd8",
    "gif": b"GIF8",
    "bmp": b"BM",
    "webp": b"RIFF",
    "ico": b"\x00\x00\x01\x00",
    "docx": b"PK",
    "xlsx": b"PK",
    "pptx": b"PK",
}

PAIRS = [
    (f"{category.value}.{subcategory}", target)
    for category, subtypes in CONVERSION_MAP.items()
    for subcategory, targets in subtypes.items()
    for target in targets
]


@pytest.mark.integration
@pytest.mark.slow
@pytest.mark.parametrize("key,target", PAIRS, ids=[f"{key}->{target}" for key, target in PAIRS])
def test_advertised_conversion(sample_sources, key, target):
    """Test that the conversion succeeds with the expected shape."""
    source = sample_sources[key]
    progress = ProgressRecorder()

    result = Dispatcher().convert(source, target, on_progress=progress)

    assert result.name == replace_extension(source.name, target)
    assert result.mime_type == mime_type_for(target)
    assert len(result.payload) > 0
    if target in MAGIC_BYTES:
        assert result.payload.startswith(MAGIC_BYTES[target])
    assert progress.values[0] == 10
    assert progress.values[-1] == 100
    assert progress.is_monotonic


@pytest.mark.integration
def test_every_routed_type_has_a_sample(sample_sources):
    """Test that the sample set covers the whole table."""
    assert {key for key, _ in PAIRS} <= set(sample_sources)
