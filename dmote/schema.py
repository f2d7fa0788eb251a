"""The configuration schema, with built-in defaults.

Angles are in radians, lengths in mm. A document is validated once, then
dumped to plain nested dicts for the accessor. Overrides in
by_key.clusters are dumped with only the keys that were set, so that a
lookup falls through to less specific levels for everything else.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import (BaseModel, BeforeValidator, ConfigDict, Discriminator,
                      Field, StrictBool, Tag, field_serializer, field_validator,
                      model_validator)
from pydantic_core import PydanticCustomError

from .matrix import CORNERS

FLEX_INDICES = ('first', 'last')

SegmentID = Annotated[int, Field(ge=0, le=4)]
Vector2 = Annotated[List[float], Field(min_length=2, max_length=2)]
Vector3 = Annotated[List[float], Field(min_length=3, max_length=3)]
Corner = Optional[Tuple[str, str]]


def parse_corner(value):
    """A corner name like 'NNE' to a pair of directions. None passes."""
    if value is None:
        return None
    if isinstance(value, str):
        if value not in CORNERS:
            raise ValueError('Unknown corner {!r}, expected one of {}'.format(
                value, ', '.join(sorted(CORNERS))))
        return CORNERS[value]
    if isinstance(value, (list, tuple)) and tuple(value) in CORNERS.values():
        return tuple(value)
    raise ValueError('Expected a corner name, not {!r}'.format(value))


def parse_index(value):
    """A column or row index: An integer, or 'first' or 'last'.

    JSON object keys are strings, so integers may come quoted.
    """
    if value in FLEX_INDICES:
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise ValueError('Expected an integer, "first" or "last"') from None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise ValueError('Expected an integer, "first" or "last"')


FlexIndex = Annotated[Union[int, Literal['first', 'last']],
                      BeforeValidator(parse_index)]


class Section(BaseModel):
    """A mapping of settings. Unknown keys are refused by name."""
    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='before')
    @classmethod
    def known_keys(cls, data):
        if isinstance(data, dict):
            for key in data:
                if key not in cls.model_fields:
                    raise PydanticCustomError(
                        'superfluous_key', 'Superfluous configuration key {key}',
                        {'key': key, 'accepted': sorted(cls.model_fields)})
        return data


#######################
## Nested Parameters ##
#######################

class Dimensions(Section):
    column: float = 0
    row: float = 0


class IndexDimensions(Section):
    column: int = 0
    row: int = 0


class MatrixLayout(Section):
    # Index of the row/column where progressive curvature is zero.
    neutral: IndexDimensions = Field(default_factory=IndexDimensions)
    # Extra space between mounts, on top of the 1U pitch.
    separation: Dimensions = Field(default_factory=Dimensions)


class Progressive(Section):
    base: float = 0
    intrinsic: float = 0
    progressive: float = 0


class Yaw(Section):
    base: float = 0
    intrinsic: float = 0


class Translation(Section):
    early: Vector3 = [0, 0, 0]
    mid: Vector3 = [0, 0, 0]
    late: Vector3 = [0, 0, 0]


class FixedColumn(Section):
    angle: float = 0
    offset: Vector3 = [0, 0, 0]


class Layout(Section):
    matrix: MatrixLayout = Field(default_factory=MatrixLayout)
    pitch: Progressive = Field(default_factory=Progressive)
    roll: Progressive = Field(default_factory=Progressive)
    yaw: Yaw = Field(default_factory=Yaw)
    translation: Translation = Field(default_factory=Translation)
    # Used only in clusters with the 'fixed' style: literal placement of
    # each column in place of progressive roll.
    fixed: FixedColumn = Field(default_factory=FixedColumn)


class Channel(Section):
    """Negative space for the movement of keycaps."""
    height: float = 1
    top_width: float = 0
    margin: float = 0


class WallSide(Section):
    # The last wall segment to build, or all of them down to the floor.
    extent: Union[Literal['full', 'none'], SegmentID] = 'full'
    parallel: float = 0
    perpendicular: float = 0


class Wall(Section):
    thickness: float = 0
    bevel: float = 0
    north: WallSide = Field(default_factory=WallSide)
    east: WallSide = Field(default_factory=WallSide)
    south: WallSide = Field(default_factory=WallSide)
    west: WallSide = Field(default_factory=WallSide)


class NestedParameters(Section):
    """Everything here can be overridden per cluster, column and key."""
    layout: Layout = Field(default_factory=Layout)
    key_style: str = 'default'
    channel: Channel = Field(default_factory=Channel)
    wall: Wall = Field(default_factory=Wall)


class RowOverrides(Section):
    parameters: NestedParameters = Field(default_factory=NestedParameters)


class ColumnOverrides(Section):
    parameters: NestedParameters = Field(default_factory=NestedParameters)
    rows: Dict[FlexIndex, RowOverrides] = {}


class ClusterOverrides(Section):
    parameters: NestedParameters = Field(default_factory=NestedParameters)
    columns: Dict[FlexIndex, ColumnOverrides] = {}


class ByKey(Section):
    parameters: NestedParameters = Field(default_factory=NestedParameters)
    clusters: Dict[str, ClusterOverrides] = {}

    @field_serializer('clusters')
    def only_what_is_set(self, clusters) -> Dict[str, Any]:
        return {name: overrides.model_dump(exclude_unset=True)
                for name, overrides in clusters.items()}


################
## Key Styles ##
################

class KeyStyle(Section):
    switch_type: Literal['alps', 'mx'] = 'alps'
    unit_size: Vector2 = [1, 1]  # Keycap width and depth in units.
    skirt_length: float = 7.8  # Keycap skirt, top to bottom.
    body_height: float = 6.0  # Keycap preview height above the skirt bottom.
    top_scale: float = 0.73  # Keycap preview taper.


class Keys(Section):
    preview: StrictBool = False
    styles: Dict[str, KeyStyle] = Field(
        default_factory=lambda: {'default': KeyStyle()})


##################
## Key Clusters ##
##################

class MatrixColumn(Section):
    rows_above_home: int = Field(0, ge=0)
    rows_below_home: int = Field(0, ge=0)


class ClusterPosition(Section):
    # 'origin', a key alias in another cluster, or a secondary.
    anchor: str = 'origin'
    offset: Vector3 = [0, 0, 0]


class Cluster(Section):
    matrix_columns: List[MatrixColumn] = Field(
        default_factory=lambda: [MatrixColumn()], min_length=1)
    style: Literal['standard', 'orthographic', 'fixed'] = 'standard'
    # Names for keys, as [column, row]. Either may be 'first' or 'last'.
    aliases: Dict[str, Tuple[FlexIndex, FlexIndex]] = {}
    position: ClusterPosition = Field(default_factory=ClusterPosition)


class Secondary(Section):
    """A named point in space, relative to another named feature."""
    alias: str
    anchor: str = 'origin'
    corner: Corner = None
    segment: SegmentID = 3
    offset: Vector3 = [0, 0, 0]

    @field_validator('corner', mode='before')
    @classmethod
    def corner_name(cls, value):
        return parse_corner(value)


##########
## Case ##
##########

def parse_tweak_leaf(value):
    """[alias, corner?, first_segment?, last_segment?] to a 4-tuple."""
    if not isinstance(value, (list, tuple)) or not 1 <= len(value) <= 4:
        raise ValueError('Expected a tweak map or a list of 1 to 4 elements')
    alias = value[0]
    corner = parse_corner(value[1]) if len(value) > 1 else None
    first_segment = value[2] if len(value) > 2 else 0
    last_segment = value[3] if len(value) > 3 else first_segment
    if isinstance(first_segment, int) and isinstance(last_segment, int) \
            and last_segment < first_segment:
        raise ValueError('Tweak segments must be in ascending order')
    return (alias, corner, first_segment, last_segment)


TweakLeaf = Annotated[Tuple[str, Corner, SegmentID, SegmentID],
                      BeforeValidator(parse_tweak_leaf)]


def tweak_kind(value):
    if isinstance(value, (dict, TweakMap)):
        return 'tweak map'
    return 'tweak leaf'


class TweakMap(Section):
    hull_around: List['TweakNode'] = Field(min_length=1)
    chunk_size: Optional[int] = Field(None, ge=2)
    at_ground: StrictBool = False
    above_ground: StrictBool = True
    highlight: StrictBool = False


TweakNode = Annotated[
    Union[Annotated[TweakMap, Tag('tweak map')],
          Annotated[TweakLeaf, Tag('tweak leaf')]],
    Discriminator(tweak_kind)]

TweakMap.model_rebuild()


class BottomPlate(Section):
    include: StrictBool = False
    preview: StrictBool = False
    thickness: float = 1


class LEDPosition(Section):
    cluster: str = 'main'


class LEDs(Section):
    include: StrictBool = False
    position: LEDPosition = Field(default_factory=LEDPosition)
    amount: int = Field(1, ge=0)
    housing_size: float = 1
    emitter_diameter: float = 1
    interval: float = 1


class FootPlatePoint(Section):
    anchor: str = 'origin'
    corner: Corner = None
    segment: SegmentID = 3
    offset: Vector2 = [0, 0]

    @field_validator('corner', mode='before')
    @classmethod
    def corner_name(cls, value):
        return parse_corner(value)


class FootPlate(Section):
    points: List[FootPlatePoint]


class FootPlates(Section):
    include: StrictBool = False
    height: float = 4
    polygons: List[FootPlate] = []


class Case(Section):
    key_mount_thickness: float = 1
    key_mount_corner_margin: float = 1
    web_thickness: float = 1
    bottom_plate: BottomPlate = Field(default_factory=BottomPlate)
    leds: LEDs = Field(default_factory=LEDs)
    tweaks: List[TweakNode] = []
    foot_plates: FootPlates = Field(default_factory=FootPlates)


class Mask(Section):
    """A box limiting the entire case.

    By default, this masks out everything below ground level.
    """
    size: Vector3 = [1000, 1000, 1000]
    center: Vector3 = [0, 0, 500]


class Configuration(Section):
    # 'solid' = SolidPython / OpenSCAD, 'cadquery' = CadQuery / OpenCascade
    engine: Literal['solid', 'cadquery'] = 'solid'
    save_dir: str = ''
    config_name: str = 'DM'
    keys: Keys = Field(default_factory=Keys)
    key_clusters: Dict[str, Cluster] = Field(
        default_factory=lambda: {'main': Cluster()}, min_length=1)
    by_key: ByKey = Field(default_factory=ByKey)
    secondaries: List[Secondary] = []
    case: Case = Field(default_factory=Case)
    mask: Mask = Field(default_factory=Mask)
