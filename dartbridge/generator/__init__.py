"""Dartbridge binding generator."""

from .dart import RenderOptions as RenderOptions
from .dart import render_argument_expr as render_argument_expr
from .dart import render_dart_and_ffi_type as render_dart_and_ffi_type
from .dart import render_dart_type as render_dart_type
from .dart import render_return_expr as render_return_expr
from .dart import render_to_dart_for_arg as render_to_dart_for_arg
from .dart import render_type_attribute as render_type_attribute
from .dart import render_type_name as render_type_name
from .errors import *
from .parser import parse as parse
from .parser import parse_type as parse_type
from .projector import project as project
from .registry import Category as Category
from .registry import CategoryRegistry as CategoryRegistry
from .types import *
