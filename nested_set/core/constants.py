"""
Constants shared by the nested set core.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

POSITION_CHILD = "child"
POSITION_LEFT = "left"
POSITION_RIGHT = "right"

MOVE_POSITIONS = (POSITION_CHILD, POSITION_LEFT, POSITION_RIGHT)

DEFAULT_KEY_COLUMN = "id"
DEFAULT_PARENT_COLUMN = "parent_id"
DEFAULT_LEFT_COLUMN = "nest_left"
DEFAULT_RIGHT_COLUMN = "nest_right"
DEFAULT_DEPTH_COLUMN = "nest_depth"
DEFAULT_TABLE_NAME = "nodes"

DEFAULT_DB_FILENAME = "nested_set.db"
DEFAULT_DRIVER_TYPE = "sqlite"
