#!/usr/bin/env python3
"""
Source Data Loader

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Fetch every configured source document, normalize it, and
build its layer, isolating each source's failures from the others.

Pipeline per source:
1. fetch_json: HTTP(S) via requests or a local file, BOM stripped, JSON parsed
2. normalize_document: one of the three recognized document shapes
3. build_layer: styling, projection, registry and legend wiring

Steps 1-2 are pure and run concurrently in a thread pool. Step 3 mutates the
shared registry and legend, so it runs on the calling thread as each source
completes, in completion order. Any exception raised for one source is logged
and recorded; the remaining sources still load.

Navigation Guide:
- decode_document: bytes/text -> parsed JSON
- fetch_json: The fetch collaborator
- load_sources: Concurrent load + join
"""

import concurrent.futures
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Union

import requests

from fire_station_map.config_types import FetchConfig, LayerSourceConfig
from fire_station_map.exceptions import FetchError, FormatError, StationMapError
from fire_station_map.ingest.format_normalizer import normalize_document
from fire_station_map.layer_builders import BuiltLayer, build_layer
from fire_station_map.models.data_models import NormalizedFeatureSet
from fire_station_map.state.context import MapContext

BOM = "\ufeff"

FetchFn = Callable[[str], Any]

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# 📡 FETCH COLLABORATOR
# ═══════════════════════════════════════════════════════════════════════════


def decode_document(payload: Union[bytes, str], location: str = "") -> Any:
    """
    Parse a UTF-8 JSON document, stripping a leading byte-order mark.

    Raises:
        FormatError: If the payload is not valid UTF-8 JSON
    """
    try:
        text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
    except UnicodeDecodeError as e:
        raise FormatError(f"{location}: not UTF-8 text ({e})") from e
    if text.startswith(BOM):
        text = text[len(BOM):]
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"{location}: invalid JSON ({e})") from e


def _is_http(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def fetch_json(
    location: str,
    session: Optional[requests.Session] = None,
    config: Optional[FetchConfig] = None,
) -> Any:
    """
    Fetch and parse one JSON document.

    Args:
        location: URL or local path
        session: requests session (a new request is made without one)
        config: Timeout, cache-busting and error-body settings

    Returns:
        Parsed JSON document

    Raises:
        FetchError: Non-2xx status, transport failure or unreadable file
        FormatError: Body is not valid JSON
    """
    config = config or FetchConfig()

    if not _is_http(location):
        try:
            payload = Path(location).read_bytes()
        except OSError as e:
            raise FetchError(f"{location}: {e}", url=location) from e
        return decode_document(payload, location)

    params = {"cb": str(int(time.time() * 1000))} if config.cache_bust else None
    getter = session.get if session is not None else requests.get
    try:
        response = getter(location, params=params, timeout=config.timeout_s)
    except requests.RequestException as e:
        raise FetchError(f"{location}: {e}", url=location) from e

    if not 200 <= response.status_code < 300:
        body = (response.text or "")[: config.error_body_chars]
        raise FetchError(
            f"{location}: {response.status_code} {response.reason}\n{body}",
            url=location,
            status=response.status_code,
            body=body,
        )
    return decode_document(response.content, location)


# ═══════════════════════════════════════════════════════════════════════════
# 📦 MULTI-SOURCE LOAD
# ═══════════════════════════════════════════════════════════════════════════


@dataclass
class LoadResult:
    """Joined outcome of loading every source.

    Attributes:
        layers: Built layers keyed by source key
        failures: Error keyed by source key
    """

    layers: Dict[str, BuiltLayer] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def _fetch_and_normalize(
    source: LayerSourceConfig, fetch: FetchFn, fetch_config: FetchConfig
) -> NormalizedFeatureSet:
    location = fetch_config.resolve(source.source)
    return normalize_document(fetch(location))


def load_sources(
    sources: Sequence[LayerSourceConfig],
    context: MapContext,
    fetch: Optional[FetchFn] = None,
    session: Optional[requests.Session] = None,
) -> LoadResult:
    """
    Load every source and build its layer.

    Args:
        sources: Source configurations
        context: Session context the layers are built into
        fetch: location -> parsed document (defaults to fetch_json)
        session: requests session for the default fetch

    Returns:
        LoadResult after all sources have finished
    """
    fetch_config = context.config.fetch
    if fetch is None:

        def fetch(location: str) -> Any:
            return fetch_json(location, session=session, config=fetch_config)

    result = LoadResult()
    if not sources:
        return result

    logger.info(f"📂 Loading {len(sources)} source(s)...")
    workers = min(fetch_config.max_workers, len(sources))
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(_fetch_and_normalize, source, fetch, fetch_config): source
            for source in sources
        }
        for future in concurrent.futures.as_completed(futures):
            source = futures[future]
            try:
                feature_set = future.result()
                result.layers[source.key] = build_layer(feature_set, source, context)
            except StationMapError as e:
                logger.error(f"   ❌ {source.label} failed: {e}")
                result.failures[source.key] = e
            except Exception as e:
                # Any other failure still only costs this one source
                logger.exception(f"   ❌ {source.label} failed unexpectedly: {e}")
                result.failures[source.key] = e

    logger.info(
        f"📂 Loaded {len(result.layers)}/{len(sources)} source(s)"
        + (f", {len(result.failures)} failed" if result.failures else "")
    )
    return result
