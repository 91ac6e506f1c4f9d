"""ModLoader: discovers, validates, orders and imports mods.

Reload sequence:
 - load persisted state (failure → io-error, keep the in-memory table;
   skipped while the last save failed so unsaved edits survive)
 - discover candidates, parse manifests (bad candidate → manifest-error,
   dropped; the rest continue)
 - resolve order seeded by the previous state (missing reference or cycle →
   the run aborts; active list and saved state stay untouched)
 - merge + save state, publish the active list
 - import every enabled package strictly in order, one at a time

Edits (enable / move) swap in a new state table and persist immediately;
the next reload still enforces loadBefore/loadAfter over a manual move.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from threading import Lock, RLock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from modcore.catalogue import ContentCatalogue, ContentImporter
from modcore.errors import (
    ErrorKind,
    LoadError,
    ManifestError,
    ResolutionError,
    StateStoreError,
)
from modcore.events import (
    CatalogueCleared,
    LoadErrorRaised,
    ModStateChanged,
    OrderOverridden,
    PackageImported,
    PackageSkipped,
    ReloadCompleted,
    emit,
)
from modcore.registry import ManifestReader, ModManifest, ModSource
from modcore.resolver import find_order_violations, resolve
from modcore.state import ModStateTable, StateStore

ErrorHandler = Callable[[LoadError], None]

_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoadedPackage:
    manifest: ModManifest
    handle: Any
    order: int

    @property
    def id(self) -> str:
        return self.manifest.id


@dataclass(frozen=True, slots=True)
class ReloadResult:
    ok: bool
    errors: Tuple[LoadError, ...] = field(default_factory=tuple)
    packages: Tuple[LoadedPackage, ...] = field(default_factory=tuple)
    imported: Tuple[str, ...] = field(default_factory=tuple)


def _handle_label(handle: Any) -> str:
    path = getattr(handle, "path", None)
    name = getattr(path, "name", None)
    return name or str(handle)


def _elapsed_ms(t0: float) -> int:
    return int((time.time() - t0) * 1000)


class ModLoader:
    def __init__(
        self,
        source: ModSource,
        reader: ManifestReader,
        state_store: StateStore,
        importer: ContentImporter,
        *,
        catalogue: Optional[ContentCatalogue] = None,
        auto_reload: bool = False,
    ) -> None:
        self._source = source
        self._reader = reader
        self._store = state_store
        self._importer = importer
        self._catalogue = catalogue
        self._auto_reload = auto_reload
        self._state = ModStateTable()
        # set while the in-memory table is newer than the stored document
        self._unsaved = False
        self._active: Tuple[LoadedPackage, ...] = ()
        self._errors: Tuple[LoadError, ...] = ()
        self._handlers: List[ErrorHandler] = []
        self._handlers_lock = Lock()
        self._state_lock = Lock()
        # one reload at a time; callers discard stale results themselves
        self._reload_lock = RLock()

    # --- Read side -----------------------------------------------------------
    @property
    def active_packages(self) -> Tuple[LoadedPackage, ...]:
        return self._active

    @property
    def state(self) -> ModStateTable:
        return self._state

    @property
    def last_errors(self) -> Tuple[LoadError, ...]:
        return self._errors

    @property
    def catalogue(self) -> Optional[ContentCatalogue]:
        return self._catalogue

    def is_enabled(self, mod_id: str) -> bool:
        return self._state.is_enabled(mod_id)

    def get_package(self, mod_id: str) -> Optional[LoadedPackage]:
        for pkg in self._active:
            if pkg.id == mod_id:
                return pkg
        return None

    # --- Error channel -------------------------------------------------------
    def on_error(self, handler: ErrorHandler) -> Callable[[], None]:
        with self._handlers_lock:
            self._handlers.append(handler)

        def _unsub() -> None:  # noqa: D401
            with self._handlers_lock:
                try:
                    self._handlers.remove(handler)
                except ValueError:
                    pass
        return _unsub

    def _raise(
        self, error: LoadError, sink: Optional[List[LoadError]] = None
    ) -> None:
        if sink is not None:
            sink.append(error)
        _log.log(
            logging.ERROR if error.kind.fatal else logging.WARNING,
            "%s: %s",
            error.kind.value,
            error.message,
        )
        emit(
            LoadErrorRaised(
                kind=error.kind.value,
                message=error.message,
                involved_ids=list(error.involved_ids),
            )
        )
        with self._handlers_lock:
            handlers = list(self._handlers)
        for h in handlers:
            try:
                h(error)
            except Exception:  # noqa: BLE001
                _log.exception("error handler failed")

    # --- Reload --------------------------------------------------------------
    def reload(self) -> ReloadResult:
        return self._run(clear_catalogue=False)

    def hot_reload(self) -> ReloadResult:
        """Reload and rebuild the catalogue from scratch.

        The catalogue is emptied only after the new order resolved, so a
        failed hot reload keeps the current content.
        """
        return self._run(clear_catalogue=True)

    def _run(self, clear_catalogue: bool) -> ReloadResult:
        with self._reload_lock:
            t0 = time.time()
            errors: List[LoadError] = []
            state = self._load_state(errors)
            candidates = self._discover(errors)
            if candidates is None:
                return self._fail(errors, t0)
            try:
                ordered = resolve(
                    [m for m, _ in candidates], state.seed_ids()
                )
            except ResolutionError as e:
                self._raise(e.to_load_error(), errors)
                return self._fail(errors, t0)

            handles = {m.id: h for m, h in candidates}
            packages = tuple(
                LoadedPackage(m, handles[m.id], idx)
                for idx, m in enumerate(ordered)
            )
            new_state = state.merged([p.id for p in packages])
            with self._state_lock:
                self._state = new_state
            self._persist(new_state, errors)
            self._active = packages

            if clear_catalogue and self._catalogue is not None:
                dropped = self._catalogue.clear()
                emit(CatalogueCleared(entry_count=dropped))

            imported = self._import_all(packages, new_state, errors)
            self._errors = tuple(errors)
            emit(
                ReloadCompleted(
                    status="ok",
                    package_count=len(packages),
                    imported_count=len(imported),
                    error_count=len(errors),
                    duration_ms=_elapsed_ms(t0),
                )
            )
            _log.info(
                "reload ok: %d mods (%d imported, %d errors)",
                len(packages),
                len(imported),
                len(errors),
            )
            return ReloadResult(True, tuple(errors), packages, imported)

    def _fail(self, errors: List[LoadError], t0: float) -> ReloadResult:
        self._errors = tuple(errors)
        emit(
            ReloadCompleted(
                status="failed",
                package_count=len(self._active),
                imported_count=0,
                error_count=len(errors),
                duration_ms=_elapsed_ms(t0),
            )
        )
        return ReloadResult(False, tuple(errors), self._active, ())

    def _load_state(self, errors: List[LoadError]) -> ModStateTable:
        if self._unsaved:
            _log.info("previous state save failed; reusing in-memory table")
            return self._state
        try:
            return self._store.load()
        except StateStoreError as e:
            self._raise(e.to_load_error(), errors)
            return self._state

    def _discover(
        self, errors: List[LoadError]
    ) -> Optional[List[Tuple[ModManifest, Any]]]:
        try:
            handles = list(self._source.discover())
        except OSError as e:
            self._raise(
                LoadError(ErrorKind.IO_ERROR, f"Mod discovery failed: {e}"),
                errors,
            )
            return None
        found: List[Tuple[ModManifest, Any]] = []
        owners: Dict[str, Any] = {}
        for h in handles:
            label = _handle_label(h)
            try:
                manifest = self._reader.read_manifest(h)
            except ManifestError as e:
                self._raise(
                    LoadError(ErrorKind.MANIFEST_ERROR, str(e), (label,)),
                    errors,
                )
                continue
            except Exception as e:  # noqa: BLE001
                self._raise(
                    LoadError(
                        ErrorKind.MANIFEST_ERROR,
                        f"Manifest reader failed for {h}: {e}",
                        (label,),
                    ),
                    errors,
                )
                continue
            if manifest.id in owners:
                self._raise(
                    LoadError(
                        ErrorKind.MANIFEST_ERROR,
                        f"Duplicate mod id {manifest.id} in {h}; "
                        f"already provided by {owners[manifest.id]}",
                        (manifest.id, label),
                    ),
                    errors,
                )
                continue
            owners[manifest.id] = h
            found.append((manifest, h))
        return found

    def _import_all(
        self,
        packages: Sequence[LoadedPackage],
        state: ModStateTable,
        errors: List[LoadError],
    ) -> Tuple[str, ...]:
        imported: List[str] = []
        for pkg in packages:
            if not state.is_enabled(pkg.id):
                emit(
                    PackageSkipped(
                        mod_id=pkg.id, order=pkg.order, reason="disabled"
                    )
                )
                continue
            t0 = time.time()
            status = "ok"
            try:
                self._importer.import_package(pkg.handle, pkg.id)
                imported.append(pkg.id)
            except Exception as e:  # noqa: BLE001
                status = "error"
                self._raise(
                    LoadError(
                        ErrorKind.CONTENT_ERROR,
                        f"Import of {pkg.id} failed: {e}",
                        (pkg.id,),
                    ),
                    errors,
                )
            emit(
                PackageImported(
                    mod_id=pkg.id,
                    order=pkg.order,
                    status=status,
                    duration_ms=_elapsed_ms(t0),
                )
            )
        return tuple(imported)

    # --- Edits ---------------------------------------------------------------
    def enable(
        self, mod_id: str, on: bool, reload: Optional[bool] = None
    ) -> bool:
        with self._state_lock:
            new_state = self._state.with_enabled(mod_id, on)
            if new_state is None:
                return False
            self._state = new_state
        persisted = self._persist(new_state)
        entry = new_state.get(mod_id)
        emit(
            ModStateChanged(
                mod_id=mod_id,
                action="enable" if on else "disable",
                order=entry.order if entry else -1,
                enabled=on,
                persisted=persisted,
            )
        )
        if self._wants_reload(reload):
            self.reload()
        return True

    def move(
        self, mod_id: str, new_index: int, reload: Optional[bool] = None
    ) -> bool:
        """Raw user override of the order.

        Constraint violations are reported, not blocked: the next reload's
        sort restores loadBefore/loadAfter and may supersede the move.
        """
        with self._state_lock:
            new_state = self._state.moved(mod_id, new_index)
            if new_state is None:
                return False
            self._state = new_state
        persisted = self._persist(new_state)
        emit(
            ModStateChanged(
                mod_id=mod_id,
                action="move",
                order=new_index,
                enabled=new_state.is_enabled(mod_id),
                persisted=persisted,
            )
        )
        violations = self.check_order()
        if violations:
            pairs = [f"{a}->{b}" for a, b in violations]
            _log.warning(
                "move of %s breaks load constraints (%s); next reload "
                "will reorder",
                mod_id,
                ", ".join(pairs),
            )
            emit(OrderOverridden(mod_id=mod_id, violations=pairs))
        if self._wants_reload(reload):
            self.reload()
        return True

    def check_order(self) -> List[Tuple[str, str]]:
        """loadBefore/loadAfter edges the saved order currently breaks."""
        manifests = [p.manifest for p in self._active]
        return find_order_violations(manifests, self._state.ordered_ids())

    def _wants_reload(self, reload: Optional[bool]) -> bool:
        return self._auto_reload if reload is None else reload

    def _persist(
        self, table: ModStateTable, errors: Optional[List[LoadError]] = None
    ) -> bool:
        try:
            self._store.save(table)
            self._unsaved = False
            return True
        except StateStoreError as e:
            self._unsaved = True
            self._raise(e.to_load_error(), errors)
            return False


__all__ = ["ModLoader", "LoadedPackage", "ReloadResult", "ErrorHandler"]
