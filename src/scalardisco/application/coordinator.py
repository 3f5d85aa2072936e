import asyncio
import logging
from typing import Callable, Iterable

from scalardisco.application.cache import DescriptionCache
from scalardisco.application.ports import (
    AdapterProvider,
    ChannelFactory,
    DescriptionFetcher,
    DescriptionFetchError,
    NetworkAdapter,
)
from scalardisco.application.session import SearchSession
from scalardisco.domain.description import DescriptionError, parse_description
from scalardisco.domain.events import DiscoveryEvent, DiscoveryEventType, RawReply
from scalardisco.domain.ssdp import (
    DEFAULT_MX,
    ST_ALL,
    ST_SCALAR_WEBAPI,
    build_msearch,
    clamp_timeout,
    parse_location,
)

LOG = logging.getLogger(__name__)

EventCallback = Callable[[DiscoveryEvent], None]


class _SearchRun:
    """Per-search state: the event callback, fetch slots and found devices."""

    def __init__(self, on_event: EventCallback | None, max_fetches: int) -> None:
        self.on_event = on_event
        self.fetch_slots = asyncio.Semaphore(max(1, max_fetches))
        self.replies: asyncio.Queue[RawReply | None] = asyncio.Queue()
        self.devices: list[DiscoveryEvent] = []

    def emit(self, event: DiscoveryEvent) -> None:
        if event.kind == DiscoveryEventType.DEVICE_DISCOVERED:
            self.devices.append(event)
        if self.on_event is not None:
            self.on_event(event)


class DiscoveryCoordinator:
    def __init__(
        self,
        channel_factory: ChannelFactory,
        fetcher: DescriptionFetcher,
        adapter_provider: AdapterProvider | None = None,
        cache: DescriptionCache | None = None,
        mx: int = DEFAULT_MX,
        strict: bool = False,
        max_concurrent_fetches: int = 8,
        target_adapters: Iterable[NetworkAdapter] | None = None,
    ) -> None:
        self.channel_factory = channel_factory
        self.fetcher = fetcher
        self.adapter_provider = adapter_provider
        self.cache = cache if cache is not None else DescriptionCache()
        self.mx = mx
        self.strict = strict
        self.max_concurrent_fetches = max_concurrent_fetches
        self.target_adapters = list(target_adapters) if target_adapters is not None else None

    def clear_cache(self) -> None:
        self.cache.clear()

    async def search_scalar_devices(
        self, timeout_s: float | None = None, on_event: EventCallback | None = None
    ) -> list[DiscoveryEvent]:
        return await self.search(ST_SCALAR_WEBAPI, timeout_s=timeout_s, on_event=on_event)

    async def search_upnp_devices(
        self,
        st: str | None = ST_ALL,
        timeout_s: float | None = None,
        on_event: EventCallback | None = None,
    ) -> list[DiscoveryEvent]:
        target = (st or "").strip() or ST_ALL
        return await self.search(target, timeout_s=timeout_s, on_event=on_event)

    async def search(
        self,
        st: str,
        timeout_s: float | None = None,
        on_event: EventCallback | None = None,
    ) -> list[DiscoveryEvent]:
        query = build_msearch(st, self.mx)
        timeout = clamp_timeout(timeout_s)
        adapters = self._resolve_adapters()
        LOG.debug(
            "SSDP discovery begin st=%s timeout_s=%.2f adapters=%s",
            st,
            timeout,
            ",".join(a.name for a in adapters) or "-",
        )

        run = _SearchRun(on_event=on_event, max_fetches=self.max_concurrent_fetches)
        sessions = [
            SearchSession(
                adapter=adapter,
                query=query,
                timeout_s=timeout,
                channel_factory=self.channel_factory,
                sink=run.replies.put_nowait,
            )
            for adapter in adapters
        ]
        consumer = asyncio.create_task(self._consume_replies(run))
        try:
            results = await asyncio.gather(*(s.run() for s in sessions), return_exceptions=True)
        finally:
            run.replies.put_nowait(None)
            await consumer

        for session, result in zip(sessions, results):
            if isinstance(result, BaseException):
                LOG.warning(
                    "SSDP session aborted adapter=%s err=%r", session.adapter.name, result
                )

        LOG.debug("SSDP discovery done st=%s devices=%d", st, len(run.devices))
        run.emit(DiscoveryEvent(kind=DiscoveryEventType.SEARCH_FINISHED))
        return run.devices

    def _resolve_adapters(self) -> list[NetworkAdapter]:
        if self.target_adapters is not None:
            return list(self.target_adapters)
        if self.adapter_provider is None:
            raise RuntimeError("No target adapters set and no adapter provider configured.")
        return list(self.adapter_provider.active_adapters())

    async def _consume_replies(self, run: _SearchRun) -> None:
        replies: list[RawReply] = []
        tasks: list[asyncio.Task] = []
        while True:
            reply = await run.replies.get()
            if reply is None:
                break
            replies.append(reply)
            tasks.append(asyncio.create_task(self._resolve_reply(run, reply)))

        # Reply failures are logged here and never abort the search.
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for reply, result in zip(replies, results):
            if isinstance(result, BaseException):
                LOG.warning(
                    "SSDP reply handling failed local=%s remote=%s err=%r",
                    reply.local_address,
                    reply.remote_address,
                    result,
                )

    async def _resolve_reply(self, run: _SearchRun, reply: RawReply) -> None:
        location = parse_location(reply.text)
        if location is None:
            LOG.debug("SSDP reply ignored (no location) remote=%s", reply.remote_address)
            return

        document = self.cache.lookup(location)
        if document is not None:
            LOG.debug("description cache hit location=%s", location)
        else:
            async with run.fetch_slots:
                try:
                    document = await self.fetcher.fetch(location)
                except DescriptionFetchError as exc:
                    LOG.debug("description fetch failed location=%s err=%s", location, exc)
                    return
            self.cache.store(location, document)

        run.emit(
            DiscoveryEvent(
                kind=DiscoveryEventType.DESCRIPTION_OBTAINED,
                location=location,
                local_address=reply.local_address,
                remote_address=reply.remote_address,
                description=document,
            )
        )

        try:
            device = parse_description(document, strict=self.strict)
        except DescriptionError as exc:
            LOG.warning("description rejected location=%s err=%s", location, exc)
            return
        if device is None:
            return

        LOG.debug(
            "device discovered udn=%s model=%s local=%s location=%s",
            device.udn,
            device.model_name,
            reply.local_address,
            location,
        )
        run.emit(
            DiscoveryEvent(
                kind=DiscoveryEventType.DEVICE_DISCOVERED,
                location=location,
                local_address=reply.local_address,
                remote_address=reply.remote_address,
                description=document,
                device=device,
            )
        )
