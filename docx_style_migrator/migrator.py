"""
Style migration orchestrator.

Sequences format detection, legacy normalization, the style graph
operation and output finalization for each public operation, and owns
the cleanup of every temporary artifact it creates.
"""

import logging
import os
import shutil
import tempfile
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional, Tuple, Union

from .detector import detect_file_format
from .exceptions import InvalidSelectionError
from .export.csv_exporter import StyleCSVExporter
from .models.style import StyleInfo
from .normalize import normalize_doc
from .package import StylePackage
from .selection import StyleSelection, parse_style_selection, require_keys
from .styles.style_graph import StyleGraphEngine
from .utils.enums import DocumentFormat

logger = logging.getLogger(__name__)

DEFAULT_WORK_DIR_NAME = "docx-style-migrator"

PathLike = Union[str, Path]


class MigrationOptions:
    """Options for style migration."""

    def __init__(self, copy_numbering: bool = True, include_dependencies: bool = True):
        """
        Initialize migration options.

        Args:
            copy_numbering: Whether numbering definitions are copied with the styles
            include_dependencies: Whether ``basedOn`` parents of selected styles are copied too
        """
        self.copy_numbering = copy_numbering
        self.include_dependencies = include_dependencies

    def __repr__(self):
        return (f"MigrationOptions(copy_numbering={self.copy_numbering}, "
                f"include_dependencies={self.include_dependencies})")


class CleanResult(NamedTuple):
    """Result of a style removal."""

    path: Path
    removed: int


def derive_docx_sibling(path: PathLike) -> Path:
    """Return ``<base>.docx`` next to ``path``, or ``<base>-1.docx``, ``<base>-2.docx``... if taken."""
    path = Path(path)
    candidate = path.with_name(f"{path.stem}.docx")
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}-{counter}.docx")
        counter += 1
    return candidate


def _replace_file(source: Path, target: Path) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.stem}-", suffix=".tmp", dir=target.parent)
    os.close(fd)
    try:
        shutil.copyfile(source, tmp_name)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class _Destination(NamedTuple):
    package: StylePackage
    working_path: Path
    output_path: Path


class StyleMigrationService:
    """
    Migrates, lists, exports and removes styles between Word documents.

    Each operation accepts legacy ``.doc`` and modern ``.docx`` inputs.
    Temporary files live in the work directory and are removed when the
    operation finishes, whether it succeeds or fails.

    Example:
        >>> service = StyleMigrationService()
        >>> service.migrate_selected("template.docx", "report.doc", ["Heading1"])
        PosixPath('report.docx')
    """

    def __init__(self, work_dir: Optional[PathLike] = None, options: Optional[MigrationOptions] = None,
                 engine: Optional[StyleGraphEngine] = None):
        """
        Initialize the service.

        Args:
            work_dir: Directory for temporary files (defaults to a
                ``docx-style-migrator`` directory in the system temp dir)
            options: Default migration options
            engine: Style graph engine to use
        """
        self._work_dir = Path(work_dir) if work_dir else Path(tempfile.gettempdir()) / DEFAULT_WORK_DIR_NAME
        self.options = options or MigrationOptions()
        self.engine = engine or StyleGraphEngine()

    @property
    def work_dir(self) -> Path:
        self._work_dir.mkdir(parents=True, exist_ok=True)
        return self._work_dir

    # Temporary artifacts

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
            logger.debug(f"Removed temporary file {path}")
        except OSError as e:
            logger.warning(f"Failed to remove temporary file {path}: {e}")

    def _discard_on_error(self, path: Path):
        def callback(exc_type, exc, tb):
            if exc_type is not None:
                self._discard(path)
            return False
        return callback

    def _temp_path(self, stack: ExitStack, suffix: str) -> Path:
        fd, name = tempfile.mkstemp(prefix="style-", suffix=suffix, dir=self.work_dir)
        os.close(fd)
        path = Path(name)
        stack.callback(self._discard, path)
        return path

    @contextmanager
    def _operation(self, name: str):
        with ExitStack() as stack:
            try:
                yield stack
            except Exception as e:
                logger.error(f"{name} failed: {e}")
                raise

    # Opening documents

    def _open_source(self, path: Path, fmt: DocumentFormat, stack: ExitStack) -> StylePackage:
        if fmt == DocumentFormat.LEGACY:
            normalized = self._temp_path(stack, ".docx")
            normalize_doc(path, normalized)
            return StylePackage.load(normalized)
        return StylePackage.load(path)

    def _open_destination(self, path: Path, fmt: DocumentFormat, stack: ExitStack) -> _Destination:
        if fmt == DocumentFormat.LEGACY:
            sibling = derive_docx_sibling(path)
            stack.push(self._discard_on_error(sibling))
            normalize_doc(path, sibling)
            return _Destination(StylePackage.load(sibling), sibling, sibling)

        working = self._temp_path(stack, ".docx")
        shutil.copyfile(path, working)
        return _Destination(StylePackage.load(working), working, path)

    def _detect_pair(self, source: Path, destination: Path) -> Tuple[DocumentFormat, DocumentFormat]:
        allowed = (DocumentFormat.LEGACY, DocumentFormat.MODERN)
        return detect_file_format(source, allowed=allowed), detect_file_format(destination, allowed=allowed)

    def _finalize(self, destination: _Destination, modified: bool = True) -> Path:
        if not modified:
            return destination.output_path
        destination.package.save(destination.working_path)
        if destination.working_path != destination.output_path:
            _replace_file(destination.working_path, destination.output_path)
        return destination.output_path

    # Operations

    def migrate_selected(self, source: PathLike, destination: PathLike, keys: Iterable[str],
                         copy_numbering: Optional[bool] = None,
                         include_dependencies: Optional[bool] = None) -> Path:
        """
        Copy selected styles, with their ``basedOn`` parents, from source to destination.

        Args:
            source: Document to copy styles from (never modified)
            destination: Document to copy styles into
            keys: Style ids or display names; ``*`` selects every style
            copy_numbering: Override of the numbering option
            include_dependencies: Override of the dependency option

        Returns:
            Path of the resulting ``.docx``

        Raises:
            InvalidSelectionError: If no key is given
            MissingStyleDefinitionsError: If the source has no styles
            StyleNotFoundError: If a key matches no source style
        """
        selection = require_keys(parse_style_selection(keys, allow_wildcard=True))
        return self.migrate(source, destination, selection, copy_numbering, include_dependencies)

    def migrate_all(self, source: PathLike, destination: PathLike, copy_numbering: Optional[bool] = None) -> Path:
        """
        Replace every destination style with the source's styles.

        Returns:
            Path of the resulting ``.docx``

        Raises:
            MissingStyleDefinitionsError: If the source has no styles
        """
        return self.migrate(source, destination, StyleSelection(wildcard=True), copy_numbering)

    def migrate(self, source: PathLike, destination: PathLike, selection: StyleSelection,
                copy_numbering: Optional[bool] = None, include_dependencies: Optional[bool] = None) -> Path:
        """
        Run a selective or full migration; the wildcard selects full replacement.

        Returns:
            Path of the resulting ``.docx``
        """
        require_keys(selection)
        copy_numbering = self.options.copy_numbering if copy_numbering is None else copy_numbering
        include_dependencies = (self.options.include_dependencies if include_dependencies is None
                                else include_dependencies)
        source, destination = Path(source), Path(destination)

        with self._operation("Style migration") as stack:
            source_format, destination_format = self._detect_pair(source, destination)
            source_package = self._open_source(source, source_format, stack)
            target = self._open_destination(destination, destination_format, stack)

            if selection.wildcard:
                self.engine.replace_all(source_package, target.package, copy_numbering)
            else:
                self.engine.transfer_selected(source_package, target.package, selection.keys,
                                              copy_numbering, include_dependencies)
            output = self._finalize(target)

        logger.info(f"Migrated styles from {source.name} into {output}")
        return output

    def list_styles(self, document: PathLike) -> List[StyleInfo]:
        """
        List a document's styles sorted by id, case-insensitively.

        Raises:
            MissingStyleDefinitionsError: If the document has no styles
        """
        document = Path(document)
        with self._operation("Style listing") as stack:
            fmt = detect_file_format(document)
            package = self._open_source(document, fmt, stack)
            return self.engine.list_styles(package)

    def export_styles(self, source: PathLike, output_path: PathLike) -> Path:
        """
        Export a document's style listing as CSV (``styleId,name,type``).

        Returns:
            Path of the CSV file
        """
        output_path = Path(output_path)
        with self._operation("Style export") as stack:
            styles = self.list_styles(source)
            staged = self._temp_path(stack, ".csv")
            StyleCSVExporter(styles).export_to_file(staged)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            _replace_file(staged, output_path)
        return output_path

    def clean_styles(self, document: PathLike, keys: Iterable[str]) -> CleanResult:
        """
        Remove styles whose id or display name matches one of ``keys``.

        The wildcard is not accepted. The document is only rewritten when
        at least one style was removed.

        Returns:
            CleanResult with the output path and the number removed

        Raises:
            WildcardNotAllowedError: If ``*`` is among the keys
            InvalidSelectionError: If no key is given
            MissingStyleDefinitionsError: If the document has no styles
        """
        selection = parse_style_selection(keys, allow_wildcard=False)
        if selection.is_empty:
            raise InvalidSelectionError("At least one style key is required for removal")
        document = Path(document)

        with self._operation("Style removal") as stack:
            fmt = detect_file_format(document, allowed=(DocumentFormat.LEGACY, DocumentFormat.MODERN))
            target = self._open_destination(document, fmt, stack)
            removed = self.engine.remove_styles(target.package, selection.keys)
            output = self._finalize(target, modified=removed > 0)

        return CleanResult(output, removed)
