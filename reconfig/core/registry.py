"""Registration, merging and reapplication of configuration sources."""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Union

from .directive import Directive, RegisterOptions
from .errors import (
    DisallowedEnvironment,
    DuplicateRegistration,
    EmptyContent,
    MalformedContent,
    MissingEnvironment,
    NotRegistered,
    SourceNotFound,
)
from .merge import split_path
from .tree import ConfigTree

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT = "default"

Loader = Callable[[Union[str, Path]], Dict[str, Any]]


def _default_loader(path: Union[str, Path]) -> Dict[str, Any]:
    from ..sources import load_source

    return load_source(path)


def _as_names(names: Union[str, Iterable[str]]) -> List[str]:
    if isinstance(names, str):
        return [names]
    return list(names)


class Registry:
    """Owns the ordered list of registered sources and the tree built from them.

    Every registered source is kept as a :class:`Directive`. The tree is a
    projection of those directives under the current environment: changing
    the environment or reloading a source rebuilds it by replaying every
    directive in registration order, so later registrations win on
    overlapping keys.

    File-derived sources are expected to have one top-level key per
    environment::

        default:
          db: {host: localhost}
        prod:
          db: {host: db.internal}

    The tree stays locked outside registry operations, so other code can
    read it but cannot change it.
    """

    def __init__(self, tree: Optional[ConfigTree] = None, loader: Optional[Loader] = None):
        """Initialize an empty Registry.

        Args:
            tree: Tree to manage. A new one is created when omitted.
            loader: Callable turning a path into a mapping. Defaults to the
                suffix-dispatching loader in :mod:`reconfig.sources`.
        """
        self.tree = tree if tree is not None else ConfigTree()
        self._loader: Loader = loader or _default_loader
        self._environment = DEFAULT_ENVIRONMENT
        self._required_environments: Optional[List[str]] = None
        self._registrations: List[Directive] = []
        self._registered_ids: Set[str] = set()
        self.tree.lock()

    # -------------------------------
    # Environment control
    # -------------------------------

    @property
    def environment(self) -> str:
        return self._environment

    def get_environment(self) -> str:
        return self._environment

    def set_environment(self, name: str) -> None:
        """Switch environment and rebuild the tree for it.

        If a registered file lacks the new environment, MissingEnvironment is
        raised and both the environment and the tree are left unchanged.
        """
        projection = self._project(self._registrations, name)
        self._environment = name
        self._install(projection)
        logger.debug("Environment set to %r", name)

    @property
    def required_environments(self) -> Optional[List[str]]:
        return self.get_required_environments()

    def get_required_environments(self) -> Optional[List[str]]:
        if self._required_environments is None:
            return None
        return list(self._required_environments)

    def set_required_environments(self, names: Union[str, Iterable[str], None]) -> None:
        """Require every environment-keyed file to define each of ``names``.

        Already registered directives are checked immediately.

        Raises:
            MissingEnvironment: A registered file lacks one of the environments.
                The previous requirement is kept.
        """
        previous = self._required_environments
        self._required_environments = None if names is None else _as_names(names)
        try:
            for directive in self._registrations:
                self.validate(directive)
        except MissingEnvironment:
            self._required_environments = previous
            raise

    def assert_environment(self, allowed: Union[str, Iterable[str]]) -> None:
        """Raise unless the current environment is one of ``allowed``."""
        allowed = _as_names(allowed)
        if self._environment in allowed:
            return
        raise DisallowedEnvironment(
            f"Current environment {self._environment!r} is not one of the "
            f"allowed environments {allowed!r}"
        )

    def assert_not_environment(self, disallowed: Union[str, Iterable[str]]) -> None:
        """Raise if the current environment is one of ``disallowed``."""
        disallowed = _as_names(disallowed)
        if self._environment not in disallowed:
            return
        raise DisallowedEnvironment(
            f"Current environment {self._environment!r} is one of the "
            f"disallowed environments {disallowed!r}"
        )

    # -------------------------------
    # Registration
    # -------------------------------

    @property
    def registrations(self) -> List[Directive]:
        """Copies of the registered directives, in registration order."""
        return [copy.deepcopy(d) for d in self._registrations]

    def is_registered(self, source_id: Union[str, Path]) -> bool:
        return str(source_id) in self._registered_ids

    def register(
        self,
        source_id: Union[str, Path],
        *,
        optional: bool = False,
        raw: bool = False,
        nested: Optional[str] = None,
    ) -> Directive:
        """Load a configuration file and merge it into the tree.

        Args:
            source_id: Absolute path of the file.
            optional: Tolerate a missing or empty file.
            raw: The file has no environment keys; merge all of it.
            nested: Dotted path to merge the content under.

        Returns:
            A copy of the new directive.

        Raises:
            ValueError: ``source_id`` is not absolute.
            DuplicateRegistration: ``source_id`` was registered before.
            SourceNotFound: The file is missing and not optional.
            EmptyContent: The file is empty and not optional.
            MalformedContent: The file cannot be parsed into a mapping.
            MissingEnvironment: The file lacks the current or a required
                environment.
        """
        if not Path(source_id).is_absolute():
            raise ValueError(
                f"register only accepts absolute paths, not {str(source_id)!r}. "
                "Config must not depend on the current directory; expand paths "
                "against a base directory before registering them."
            )
        source_id = str(source_id)
        if source_id in self._registered_ids:
            raise DuplicateRegistration(f"{source_id} is already registered")

        options = RegisterOptions(optional=optional, raw=raw, nested=nested)
        config = self._load(source_id, options)
        directive = self._register_parsed(Directive(config, source_id, options))
        self._registered_ids.add(source_id)
        logger.debug("Registered %s (%s)", source_id, options)
        return directive

    def register_raw(self, config: Mapping[str, Any]) -> Directive:
        """Merge an in-memory mapping into the tree.

        The mapping is applied as-is under every environment and replayed
        like any other registration.
        """
        if not isinstance(config, Mapping):
            raise TypeError(f"register_raw expects a mapping, not {type(config).__name__}")
        return self._register_parsed(Directive(copy.deepcopy(dict(config))))

    def _register_parsed(self, directive: Directive) -> Directive:
        self.validate(directive)
        with self._allow_changes():
            self._apply(self.tree, directive, self._environment)
        self._registrations.append(directive)
        return copy.deepcopy(directive)

    def _load(self, source_id: str, options: RegisterOptions) -> Optional[Dict[str, Any]]:
        try:
            return self._loader(source_id)
        except SourceNotFound:
            if not options.optional:
                raise
            logger.debug("Optional config %s not found", source_id)
            return None
        except EmptyContent as e:
            if not options.optional:
                raise
            logger.warning("%s Continuing.", e)
            return None

    # -------------------------------
    # Validation
    # -------------------------------

    def validate(self, directive: Directive) -> None:
        """Check ``directive`` defines every required environment.

        Raises:
            MissingEnvironment: A file-derived, environment-keyed directive
                lacks a required environment.
        """
        if directive.config is None and directive.options.optional:
            return
        if directive.options.raw:
            return
        if not directive.is_file_derived or directive.config is None:
            return
        for environment in self._required_environments or []:
            if environment not in directive.config:
                raise MissingEnvironment(
                    f"Required environment {environment!r} not defined in config "
                    f"file {directive.source_id!r}. (HINT: add a top-level key "
                    f"{environment!r}; YAML's `<<` merge key can inherit defaults.)",
                    environment,
                    directive.source_id,
                )

    # -------------------------------
    # Reload and reapplication
    # -------------------------------

    def reload(self, source_id: Union[str, Path]) -> Directive:
        """Re-read a registered file and rebuild the tree.

        On any error the directive and the tree keep their previous content.
        An optional file that has disappeared (or become empty) is cleared
        and contributes nothing, as it would at registration.

        Raises:
            NotRegistered: ``source_id`` was never registered.
        """
        source_id = str(source_id)
        index = self._index_of(source_id)
        directive = self._registrations[index]

        config = self._load(source_id, directive.options)
        candidate = directive.with_config(config)
        self.validate(candidate)

        registrations = list(self._registrations)
        registrations[index] = candidate
        projection = self._project(registrations, self._environment)

        self._registrations[index] = candidate
        self._install(projection)
        logger.debug("Reloaded %s", source_id)
        return copy.deepcopy(candidate)

    def reapply(self) -> None:
        """Rebuild the tree from every directive under the current environment."""
        self._install(self._project(self._registrations, self._environment))

    def _index_of(self, source_id: str) -> int:
        for i, directive in enumerate(self._registrations):
            if directive.source_id == source_id:
                return i
        raise NotRegistered(f"{source_id!r} was not registered")

    def _project(self, registrations: List[Directive], environment: str) -> ConfigTree:
        """Replay ``registrations`` under ``environment`` into a scratch tree."""
        scratch = ConfigTree()
        for directive in registrations:
            self._apply(scratch, directive, environment)
        return scratch

    def _apply(self, tree: ConfigTree, directive: Directive, environment: str) -> None:
        if directive.options.optional and directive.config is None:
            return
        choice = self._extract(directive, environment)
        tree.merge_at(split_path(directive.options.nested), choice)

    def _install(self, projection: ConfigTree) -> None:
        with self._allow_changes():
            self.tree.reset()
            self.tree.merge_at(None, projection.to_dict())
        logger.debug("Reapplied %d registrations", len(self._registrations))

    def _extract(self, directive: Directive, environment: str) -> Dict[str, Any]:
        """Pick the part of a directive's content that applies to ``environment``."""
        config = directive.config
        if directive.options.raw or not directive.is_file_derived:
            return config or {}
        if config is None:
            # Optional file that was missing
            return {}
        if environment not in config:
            raise MissingEnvironment(
                f"Current environment {environment!r} not defined in config file "
                f"{directive.source_id!r}. (HINT: add a top-level key "
                f"{environment!r}; YAML's `<<` merge key can inherit defaults.)",
                environment,
                directive.source_id,
            )
        choice = config[environment]
        if choice is None:
            return {}
        if not isinstance(choice, Mapping):
            raise MalformedContent(
                f"Environment {environment!r} in {directive.source_id!r} is a "
                f"{type(choice).__name__}, not a mapping",
                directive.source_id,
            )
        return choice

    @contextmanager
    def _allow_changes(self) -> Iterator[ConfigTree]:
        """Unlock the tree for the duration of the block.

        The previous lock state is restored on exit, even when the block
        raises, so nested uses do not relock early.
        """
        was_locked = self.tree.locked
        self.tree.unlock()
        try:
            yield self.tree
        finally:
            if was_locked:
                self.tree.lock()
