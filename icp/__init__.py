"""ICP — Interval Constraint Propagation: unfold, constrain, propagate, contract."""

__version__ = "0.1.0"

from icp.errors import BuildError, ParseError, MalformedExpression, UnsupportedOperator
from icp.interval import Interval, EMPTY, ENTIRE
from icp.ast_nodes import Expr, Leaf, Call, var, const, call
from icp.parser import parse
from icp.symbols import SymbolGenerator
from icp.ir import OpKind, Statement, Program, ReverseCall
from icp.pass1_unfold import unfold, unfold_program, constrain
from icp.registry import OperationRegistry, DEFAULT_REGISTRY
from icp.pass2_propagate import propagate
from icp.contractor import Contractor, build, fixpoint, is_inconsistent
from icp.verify import check_contraction
