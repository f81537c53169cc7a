import pytest

from screencast.features.capture.cache import LocalCache


@pytest.mark.asyncio
async def test_put_get_overwrite_delete(tmp_path):
    cache = LocalCache(str(tmp_path / "cache.db"))
    assert await cache.get("k") is None

    await cache.put("k", b"one")
    await cache.put("k", b"two")
    assert await cache.get("k") == b"two"

    await cache.delete("k")
    assert await cache.get("k") is None
    # supprimer une clé absente n'est pas une erreur
    await cache.delete("k")
    cache.close()


@pytest.mark.asyncio
async def test_survives_restart(tmp_path):
    path = str(tmp_path / "cache.db")
    cache = LocalCache(path)
    await cache.put("latest-recording", b"\x00\x01binary")
    cache.close()

    reopened = LocalCache(path)
    assert await reopened.get("latest-recording") == b"\x00\x01binary"
    reopened.close()
