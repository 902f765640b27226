"""
Extension Bag
=============

Every document object keeps the XML it did not recognize in an
``ExtensionBag`` so that re-encoding reproduces it. Dublin Core elements are
indexed as they are added; dialects that lack a native title, author or
date read them through the ``DublinCore`` accessor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .namespaces import DC_NS, register_namespace


class DublinCoreTerm(str, Enum):
    """The fifteen Dublin Core element set terms."""
    TITLE = "title"
    CREATOR = "creator"
    SUBJECT = "subject"
    DESCRIPTION = "description"
    PUBLISHER = "publisher"
    CONTRIBUTOR = "contributor"
    DATE = "date"
    TYPE = "type"
    FORMAT = "format"
    IDENTIFIER = "identifier"
    SOURCE = "source"
    LANGUAGE = "language"
    RELATION = "relation"
    COVERAGE = "coverage"
    RIGHTS = "rights"


_DC_TERMS = {term.value: term for term in DublinCoreTerm}


@dataclass
class ExtensionAttribute:
    """An attribute outside the modelled schema."""
    namespace: str
    name: str
    value: str
    prefix: Optional[str] = None

    @property
    def key(self) -> str:
        """Clark notation key, ``{ns}name`` or bare ``name``."""
        return f"{{{self.namespace}}}{self.name}" if self.namespace else self.name


@dataclass
class ExtensionElement:
    """An element outside the modelled schema, kept with its subtree."""
    namespace: str
    name: str
    text: str = ""
    prefix: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["ExtensionElement"] = field(default_factory=list)
    # Text following the element inside its parent (mixed content)
    tail: str = ""

    @property
    def tag(self) -> str:
        return f"{{{self.namespace}}}{self.name}" if self.namespace else self.name

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        register_namespace(namespaces, self.namespace, self.prefix)
        for key in self.attributes:
            if key.startswith("{"):
                register_namespace(namespaces, key[1:key.index("}")])
        for child in self.children:
            child.add_namespaces(namespaces)


class DublinCore:
    """Keyed view over the Dublin Core elements of an ExtensionBag."""

    def __init__(self, bag: "ExtensionBag"):
        self._bag = bag

    def get(self, term: DublinCoreTerm) -> Optional[str]:
        element = self._bag._dublin_core.get(DublinCoreTerm(term))
        if element is None:
            return None
        return element.text

    def __getitem__(self, term: DublinCoreTerm) -> Optional[str]:
        return self.get(term)

    def __setitem__(self, term: DublinCoreTerm, value: Optional[str]) -> None:
        self._bag.set_text(DC_NS, DublinCoreTerm(term).value, value, prefix="dc")

    def __contains__(self, term: DublinCoreTerm) -> bool:
        return DublinCoreTerm(term) in self._bag._dublin_core

    def first_of(self, *terms: DublinCoreTerm) -> Optional[str]:
        """Return the first non-empty value among ``terms``."""
        for term in terms:
            value = self.get(term)
            if value:
                return value
        return None

    def as_dict(self) -> Dict[str, str]:
        return {term.value: element.text for term, element in self._bag._dublin_core.items()}


class ExtensionBag:
    """Ordered store of unrecognized elements and attributes."""

    def __init__(self):
        self.elements: List[ExtensionElement] = []
        self.attributes: List[ExtensionAttribute] = []
        # First element for each DC term, maintained on every mutation
        self._dublin_core: Dict[DublinCoreTerm, ExtensionElement] = {}

    @property
    def dublin_core(self) -> DublinCore:
        return DublinCore(self)

    def add_element(self, element: ExtensionElement) -> ExtensionElement:
        self.elements.append(element)
        self._index(element)
        return element

    def add_attribute(self, attribute: ExtensionAttribute) -> ExtensionAttribute:
        self.attributes.append(attribute)
        return attribute

    def find(self, namespace: str, name: str) -> Optional[ExtensionElement]:
        for element in self.elements:
            if element.namespace == namespace and element.name == name:
                return element
        return None

    def find_text(self, namespace: str, name: str) -> Optional[str]:
        element = self.find(namespace, name)
        return element.text if element is not None else None

    def find_attribute(self, namespace: str, name: str) -> Optional[str]:
        for attribute in self.attributes:
            if attribute.namespace == namespace and attribute.name == name:
                return attribute.value
        return None

    def set_text(
        self, namespace: str, name: str, text: Optional[str], prefix: Optional[str] = None
    ) -> None:
        """Replace the first matching element's text, or append a new element.

        Setting None removes every matching element.
        """
        if text is None:
            self.remove(namespace, name)
            return
        element = self.find(namespace, name)
        if element is None:
            self.add_element(ExtensionElement(namespace, name, text, prefix=prefix))
        else:
            element.text = text

    def remove(self, namespace: str, name: str) -> None:
        self.elements = [
            e for e in self.elements if not (e.namespace == namespace and e.name == name)
        ]
        self._reindex()

    def add_namespaces(self, namespaces: Dict[str, str]) -> None:
        for element in self.elements:
            element.add_namespaces(namespaces)
        for attribute in self.attributes:
            register_namespace(namespaces, attribute.namespace, attribute.prefix)

    def _index(self, element: ExtensionElement) -> None:
        if element.namespace != DC_NS:
            return
        term = _DC_TERMS.get(element.name)
        if term is not None and term not in self._dublin_core:
            self._dublin_core[term] = element

    def _reindex(self) -> None:
        self._dublin_core = {}
        for element in self.elements:
            self._index(element)

    def __iter__(self) -> Iterator[ExtensionElement]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements) + len(self.attributes)

    def __repr__(self) -> str:
        return f"ExtensionBag(elements={len(self.elements)}, attributes={len(self.attributes)})"
