"""Dependency Injection Container

Manages the engine's dependency graph, providing lazy initialization and
lifecycle management for the store, tallies, services and adapters.
Components are created on-demand and cached for reuse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.commands.dispatcher import CommandDispatcher
    from ..application.interfaces.media_resolver import MediaResolver
    from ..application.interfaces.playlist_publisher import PlaylistPublisher
    from ..application.interfaces.renderer import Renderer
    from ..application.interfaces.snapshot_repository import SnapshotRepository
    from ..application.services.notification_service import NotificationService
    from ..application.services.playback_service import PlaybackScheduler
    from ..application.services.playlist_service import PlaylistExporter
    from ..application.services.vote_service import VoteService
    from ..domain.music.request_store import RequestStore
    from ..domain.shared.events import EventBus
    from ..domain.voting.services import SkipVotePolicy
    from ..domain.voting.user_set import UserSet
    from ..infrastructure.chat.gateway import ChatGateway
    from ..infrastructure.chat.outbox import RateLimitedOutbox
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    One container wires one engine instance. Collaborators can be replaced
    before first access by assigning the private slot, which is how tests plug
    in fake renderers and resolvers.
    """

    settings: Settings

    # Persistence layer
    _database: Database | None = None
    _snapshot_repository: SnapshotRepository | None = None

    # Core state
    _event_bus: EventBus | None = None
    _store: RequestStore | None = None
    _skip_votes: UserSet | None = None
    _likes: UserSet | None = None
    _subscribers: UserSet | None = None
    _skip_policy: SkipVotePolicy | None = None

    # Infrastructure adapters
    _resolver: MediaResolver | None = None
    _renderer: Renderer | None = None
    _publisher: PlaylistPublisher | None = None
    _outbox: RateLimitedOutbox | None = None
    _gateway: ChatGateway | None = None

    # Application services
    _scheduler: PlaybackScheduler | None = None
    _vote_service: VoteService | None = None
    _notification_service: NotificationService | None = None
    _playlist_exporter: PlaylistExporter | None = None
    _dispatcher: CommandDispatcher | None = None

    # === Database ===

    @property
    def database(self) -> Database:
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    @property
    def snapshot_repository(self) -> SnapshotRepository:
        if self._snapshot_repository is None:
            from ..infrastructure.persistence.snapshot_repository import (
                SQLiteSnapshotRepository,
            )

            self._snapshot_repository = SQLiteSnapshotRepository(self.database)
        return self._snapshot_repository

    # === Core state ===

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import EventBus

            self._event_bus = EventBus()
        return self._event_bus

    @property
    def store(self) -> RequestStore:
        if self._store is None:
            from ..domain.music.request_store import RequestStore

            self._store = RequestStore()
        return self._store

    @property
    def skip_votes(self) -> UserSet:
        if self._skip_votes is None:
            from ..domain.voting.user_set import UserSet

            self._skip_votes = UserSet()
        return self._skip_votes

    @property
    def likes(self) -> UserSet:
        if self._likes is None:
            from ..domain.voting.user_set import UserSet

            self._likes = UserSet()
        return self._likes

    @property
    def subscribers(self) -> UserSet:
        if self._subscribers is None:
            from ..domain.voting.user_set import UserSet

            self._subscribers = UserSet()
        return self._subscribers

    @property
    def skip_policy(self) -> SkipVotePolicy:
        if self._skip_policy is None:
            from ..domain.voting.services import SkipVotePolicy

            voting = self.settings.voting
            self._skip_policy = SkipVotePolicy(
                ratio=voting.skip_threshold_ratio, min_votes=voting.min_skip_votes
            )
        return self._skip_policy

    # === Infrastructure Adapters ===

    @property
    def resolver(self) -> MediaResolver:
        if self._resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._resolver = YtDlpResolver(self.settings.resolver)
        return self._resolver

    @property
    def renderer(self) -> Renderer:
        if self._renderer is None:
            from ..infrastructure.audio.ffmpeg_renderer import FFmpegRenderer

            self._renderer = FFmpegRenderer(self.resolver, self.settings.renderer)
        return self._renderer

    @property
    def publisher(self) -> PlaylistPublisher:
        if self._publisher is None:
            from ..infrastructure.publishing.paste_publisher import (
                FileHostPublisher,
                PastePublisher,
            )

            self._publisher = PastePublisher(
                self.settings.publisher,
                fallback=FileHostPublisher(self.settings.publisher),
            )
        return self._publisher

    @property
    def gateway(self) -> ChatGateway:
        if self._gateway is None:
            from ..infrastructure.chat.gateway import ChatGateway

            self._gateway = ChatGateway(
                settings=self.settings.chat,
                dispatcher=self.dispatcher,
                sink=self.outbox,
            )
        return self._gateway

    @property
    def outbox(self) -> RateLimitedOutbox:
        if self._outbox is None:
            from ..infrastructure.chat.outbox import RateLimitedOutbox

            # Late-bound so the gateway can be created after the outbox.
            async def send(user: str, text: str) -> None:
                await self.gateway.send_private(user, text)

            self._outbox = RateLimitedOutbox(send, self.settings.messaging)
        return self._outbox

    # === Application Services ===

    @property
    def scheduler(self) -> PlaybackScheduler:
        if self._scheduler is None:
            from ..application.services.playback_service import PlaybackScheduler

            self._scheduler = PlaybackScheduler(
                store=self.store,
                renderer=self.renderer,
                event_bus=self.event_bus,
                skip_votes=self.skip_votes,
                settings=self.settings.playback,
                snapshot_repository=self.snapshot_repository,
            )
        return self._scheduler

    @property
    def vote_service(self) -> VoteService:
        if self._vote_service is None:
            from ..application.services.vote_service import VoteService

            self._vote_service = VoteService(
                store=self.store,
                scheduler=self.scheduler,
                skip_votes=self.skip_votes,
                likes=self.likes,
                policy=self.skip_policy,
            )
        return self._vote_service

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            from ..application.services.notification_service import NotificationService

            self._notification_service = NotificationService(
                event_bus=self.event_bus,
                sink=self.outbox,
                subscribers=self.subscribers,
                likes=self.likes,
                backup_min_likes=self.settings.voting.backup_min_likes,
                backup_rotation_size=self.settings.voting.backup_rotation_size,
            )
        return self._notification_service

    @property
    def playlist_exporter(self) -> PlaylistExporter:
        if self._playlist_exporter is None:
            from ..application.services.playlist_service import PlaylistExporter

            self._playlist_exporter = PlaylistExporter(
                store=self.store, scheduler=self.scheduler, publisher=self.publisher
            )
        return self._playlist_exporter

    @property
    def dispatcher(self) -> CommandDispatcher:
        if self._dispatcher is None:
            from ..application.commands.dispatcher import CommandDispatcher

            self._dispatcher = CommandDispatcher(
                store=self.store,
                scheduler=self.scheduler,
                votes=self.vote_service,
                exporter=self.playlist_exporter,
                resolver=self.resolver,
                subscribers=self.subscribers,
                settings=self.settings.playback,
                is_moderator=self.is_moderator,
                snapshot_repository=self.snapshot_repository,
            )
        return self._dispatcher

    def is_moderator(self, user: str) -> bool:
        return user in self.settings.chat.moderators

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Open the database and restore the persisted queue and subscribers."""
        await self.database.initialize()

        entries = await self.snapshot_repository.load_queue()
        await self.store.load(entries)
        self.subscribers.replace(await self.snapshot_repository.load_subscribers())

        self.notification_service.start()

    async def shutdown(self) -> None:
        """Stop background tasks, persist state and release resources."""
        if self._gateway is not None:
            await self._gateway.stop()

        if self._scheduler is not None:
            await self._scheduler.stop()

        if self._outbox is not None:
            await self._outbox.stop()

        if self._notification_service is not None:
            self._notification_service.stop()

        if self._database is not None and self._database.is_initialized:
            await self.snapshot_repository.save_store(self.store)
            await self.snapshot_repository.save_subscribers(self.subscribers.snapshot())
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
