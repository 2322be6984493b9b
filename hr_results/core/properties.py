"""Parser and evaluator for PMS-style property files.

A property file is plain text, one directive or assignment per logical line:

    # comment to end of line
    name value                  assignment (first token is the name)
    name value1 \\              trailing backslash continues the line
        value2
    >include {SourceData}/x.txt another property file, {macros} expanded
    >skip ... >endskip          everything in between is ignored
    >calendar ... >endcalendar  calendar lines (see calendar_parser)
    >endoffile                  stop reading this file

Parsing and evaluation are separate: parse_file() builds a PropertyDocument
and PropertyEvaluator walks it, so an include is only resolved (and its
macros expanded) when the walk reaches it.
"""

import logging
import os
import re
from dataclasses import dataclass, field


logger = logging.getLogger('hr_results.properties')

_MACRO_RE = re.compile(r'\{(\w+)\}')


class PropertiesError(Exception):
    """A property file could not be read."""


# ========================================
# Document nodes
# ========================================

@dataclass
class Assignment:
    name: str
    value: str
    line_num: int


@dataclass
class Include:
    path: str                 # unexpanded, may contain {macros}
    line_num: int


@dataclass
class CalendarBlock:
    lines: list[str]
    line_num: int


@dataclass
class EndOfFile:
    line_num: int


@dataclass
class PropertyDocument:
    path: str
    nodes: list = field(default_factory=list)


# ========================================
# Lexing: comments, trimming, continuation
# ========================================

def _clean(line: str) -> str:
    """Strip a comment (and the whitespace before it) and trim."""
    line = re.sub(r'\s*#.*$', '', line.rstrip('\r\n'))
    return line.strip()


def _directive(line: str) -> str | None:
    """Return the lowercased directive name of a '>' line, else None."""
    if not line.startswith('>'):
        return None
    return line.split(None, 1)[0].lower()


# ========================================
# Recursive-descent parser
# ========================================

class _Parser:
    def __init__(self, path: str, raw_lines: list[str]):
        self.path = path
        self._lines = raw_lines
        self._pos = 0

    def _at_end(self) -> bool:
        return self._pos >= len(self._lines)

    def _next_physical(self) -> str:
        line = _clean(self._lines[self._pos])
        self._pos += 1
        return line

    def _next(self):
        """Return (line_num, logical line).

        Continuation is applied here rather than up front so that skip
        blocks, which only look at physical lines, never join anything.
        """
        line_num = self._pos + 1
        line = self._next_physical()
        while line.endswith('\\'):
            line = line[:-1]
            if line != line.rstrip():
                # whitespace before the '\' separates the joined words
                line = line.rstrip() + ' '
            elif not re.search(r'\s', line):
                # "name\" followed by "value" must still split into name/value
                line += ' '
            if self._at_end():
                break
            line += self._next_physical()
        return line_num, line.strip()

    def parse_document(self) -> PropertyDocument:
        doc = PropertyDocument(self.path)
        while not self._at_end():
            node = self._parse_statement()
            if node is None:
                continue
            doc.nodes.append(node)
            if isinstance(node, EndOfFile):
                break
        return doc

    def _parse_statement(self):
        line_num, line = self._next()
        if not line:
            return None
        directive = _directive(line)
        if directive == '>skip':
            self._parse_skip()
            return None
        if directive == '>calendar':
            return self._parse_calendar(line_num)
        if directive == '>include':
            parts = line.split(None, 1)
            if len(parts) < 2:
                logger.warning(f'{self.path}:{line_num}: >include without a file name - ignored')
                return None
            return Include(parts[1], line_num)
        if directive == '>endoffile':
            return EndOfFile(line_num)
        if directive is not None:
            logger.debug(f'{self.path}:{line_num}: ignoring directive {directive}')
            return None
        parts = line.split(None, 1)
        value = parts[1] if len(parts) > 1 else ''
        return Assignment(parts[0], value, line_num)

    def _parse_skip(self):
        """Consume everything up to and including >endskip."""
        while not self._at_end():
            if _directive(self._next_physical()) == '>endskip':
                return

    def _parse_calendar(self, line_num: int) -> CalendarBlock:
        block = CalendarBlock([], line_num)
        while not self._at_end():
            _, line = self._next()
            if not line:
                continue
            directive = _directive(line)
            if directive == '>endcalendar':
                break
            if directive == '>skip':
                self._parse_skip()
                continue
            block.lines.append(line)
        return block


def parse_file(path: str) -> PropertyDocument:
    """Parse a property file into a PropertyDocument.

    Raises:
        PropertiesError: the file can't be opened.
    """
    try:
        with open(path, 'r') as f:
            raw_lines = f.readlines()
    except OSError as e:
        raise PropertiesError(f"Can't open {path}: {e.strerror or e}") from e
    return _Parser(path, raw_lines).parse_document()


def parse_text(text: str, path: str = '<string>') -> PropertyDocument:
    return _Parser(path, text.splitlines(keepends=True)).parse_document()


# ========================================
# Evaluation
# ========================================

def expand_macros(text: str, macros: dict) -> str:
    """Replace {name} tokens with macros[name]; unknown names are left as is."""
    return _MACRO_RE.sub(lambda m: macros.get(m.group(1), m.group(0)), text)


class PropertyEvaluator:
    """Walk property documents, following includes, into a flat mapping.

    Args:
        macros: Initial mapping (seed macros). Updated in place.
        on_calendar_line: Called with each calendar line, in file order.
        assign: If False, plain assignments are ignored (calendar-only walk).
    """

    def __init__(self, macros: dict | None = None, on_calendar_line=None,
                 assign: bool = True):
        self.macros = macros if macros is not None else {}
        self.on_calendar_line = on_calendar_line
        self.assign = assign
        self._including: list[str] = []   # abspaths of the files being read

    def evaluate_file(self, path: str) -> dict:
        """Evaluate the file at path.

        Raises:
            PropertiesError: the file can't be read, or it includes itself
                             directly or through other files.
        """
        real_path = os.path.abspath(path)
        if real_path in self._including:
            raise PropertiesError(f'{path}: recursive >include')
        logger.debug(f'Reading properties from {path}')
        self._including.append(real_path)
        try:
            self.evaluate(parse_file(path))
        finally:
            self._including.pop()
        return self.macros

    def evaluate(self, doc: PropertyDocument) -> dict:
        base_dir = os.path.dirname(os.path.abspath(doc.path))
        for node in doc.nodes:
            if isinstance(node, Assignment):
                if self.assign:
                    self.macros[node.name] = expand_macros(node.value, self.macros)
            elif isinstance(node, Include):
                include_path = expand_macros(node.path, self.macros)
                if not os.path.isabs(include_path):
                    include_path = os.path.join(base_dir, include_path)
                self.evaluate_file(include_path)
            elif isinstance(node, CalendarBlock):
                if self.on_calendar_line is not None:
                    for line in node.lines:
                        self.on_calendar_line(line)
            elif isinstance(node, EndOfFile):
                break
        return self.macros


def load_properties(properties_dir: str, properties_file: str,
                    macros: dict | None = None) -> dict:
    """Read a property file (and everything it includes) into a mapping.

    Args:
        properties_dir: Directory containing the property file.
        properties_file: Simple name of the property file.
        macros: Seed mapping; updated in place and returned.

    Returns:
        The flat name -> value mapping.
    """
    path = os.path.join(properties_dir, properties_file)
    return PropertyEvaluator(macros).evaluate_file(path)
