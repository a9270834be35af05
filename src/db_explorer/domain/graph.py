from pydantic import BaseModel, Field
from typing import List, Optional

from .schema import Column


class GraphNode(BaseModel):
    """
    A table in the schema diagram.

    Size is fixed when the node is built (height grows with the column count);
    x/y are the top-left corner and stay None until the layout runs.
    """

    id : str = Field(..., description="Table name")
    columns : List[Column] = Field(default_factory=list, description="Columns listed inside the node")
    width : float = Field(..., gt=0, description="Node width in layout units")
    height : float = Field(..., gt=0, description="Node height in layout units")
    x : Optional[float] = Field(default=None, description="Left edge after layout")
    y : Optional[float] = Field(default=None, description="Top edge after layout")
    rank : Optional[int] = Field(default=None, description="Layer index after layout, 0 at the top")
    order : Optional[int] = Field(default=None, description="Position within the layer after layout")

    @property
    def is_positioned(self) -> bool:
        return self.x is not None and self.y is not None


class GraphEdge(BaseModel):
    """
    A foreign key drawn from the referenced table (source) to the table
    holding the key (target), i.e. "source is referenced by target".
    """

    id : str = Field(..., description="'{holding_table}-{fk_column}-{referenced_table}'")
    source : str = Field(..., description="Referenced table")
    target : str = Field(..., description="Table holding the foreign key")
    label : str = Field(..., description="Foreign key column")

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class SchemaGraph(BaseModel):
    """Nodes and edges of the diagram plus the extent of the drawing."""

    nodes : List[GraphNode] = Field(default_factory=list)
    edges : List[GraphEdge] = Field(default_factory=list)
    width : float = Field(default=0, ge=0, description="Right-most node edge after layout")
    height : float = Field(default=0, ge=0, description="Bottom-most node edge after layout")
