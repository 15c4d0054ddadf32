"""
Layout tree handed from the slide composer to the rasterizer.

The node set is closed: every node is one of the models below, discriminated by
its ``kind`` field.
"""

from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class LayoutNodeBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    style: Dict[str, Any] = Field(default_factory=dict)
    role: Optional[str] = Field(default=None, description="Element kind this node renders, e.g. 'slide_number'")


class ContainerNode(LayoutNodeBase):
    kind: Literal["container"] = "container"
    children: List["LayoutNode"] = Field(default_factory=list)


class ImageNode(LayoutNodeBase):
    kind: Literal["image"] = "image"
    src: str


class OverlayNode(LayoutNodeBase):
    kind: Literal["overlay"] = "overlay"


class TextSpanNode(LayoutNodeBase):
    kind: Literal["text_span"] = "text_span"
    text: str


class HeadingNode(LayoutNodeBase):
    kind: Literal["heading"] = "heading"
    text: str


class ParagraphNode(LayoutNodeBase):
    kind: Literal["paragraph"] = "paragraph"
    text: str


LayoutNode = Annotated[
    Union[ContainerNode, ImageNode, OverlayNode, TextSpanNode, HeadingNode, ParagraphNode],
    Field(discriminator="kind"),
]

TextNode = Union[TextSpanNode, HeadingNode, ParagraphNode]

ContainerNode.model_rebuild()


def iter_nodes(node: LayoutNodeBase) -> Iterator[LayoutNodeBase]:
    """Depth-first walk in drawing order, root first."""
    yield node
    if isinstance(node, ContainerNode):
        for child in node.children:
            yield from iter_nodes(child)


def find_by_role(node: LayoutNodeBase, role: str) -> List[LayoutNodeBase]:
    return [n for n in iter_nodes(node) if n.role == role]
