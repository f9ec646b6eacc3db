# -*- coding: utf-8 -*-
"""
Recognized LaTeX command names.

Commands are stored without the leading backslash. The groups mirror the
families a chat answer typically mixes into prose.
"""

from typing import FrozenSet, Iterable, Optional


# ---------------------------------------------------------------------------
# Command families
# ---------------------------------------------------------------------------

_GREEK_LETTERS = {
    'alpha', 'beta', 'gamma', 'delta', 'epsilon', 'varepsilon', 'zeta',
    'eta', 'theta', 'vartheta', 'iota', 'kappa', 'lambda', 'mu', 'nu',
    'xi', 'pi', 'varpi', 'rho', 'varrho', 'sigma', 'varsigma', 'tau',
    'upsilon', 'phi', 'varphi', 'chi', 'psi', 'omega',
    # Uppercase
    'Gamma', 'Delta', 'Theta', 'Lambda', 'Xi', 'Pi', 'Sigma', 'Upsilon',
    'Phi', 'Psi', 'Omega',
}

_OPERATORS = {
    'times', 'cdot', 'div', 'pm', 'mp',
    'leq', 'geq', 'neq', 'le', 'ge', 'ne', 'lt', 'gt',
    'approx', 'equiv', 'sim', 'simeq', 'cong', 'll', 'gg',
    'subset', 'supset', 'subseteq', 'supseteq',
    'in', 'notin', 'ni', 'cup', 'cap', 'setminus',
    'land', 'lor', 'neg', 'forall', 'exists',
    'partial', 'nabla', 'infty', 'propto', 'angle', 'perp', 'parallel',
    'circ', 'dots', 'cdots', 'ldots', 'vdots',
}

_ARROWS = {
    'rightarrow', 'leftarrow', 'Rightarrow', 'Leftarrow',
    'leftrightarrow', 'Leftrightarrow', 'uparrow', 'downarrow',
    'mapsto', 'to', 'implies', 'iff',
}

_BIG_OPERATORS = {
    'sum', 'prod', 'coprod', 'int', 'iint', 'iiint', 'oint',
    'bigcup', 'bigcap', 'lim', 'limsup', 'liminf',
}

_FUNCTION_NAMES = {
    'sin', 'cos', 'tan', 'sec', 'csc', 'cot',
    'arcsin', 'arccos', 'arctan', 'sinh', 'cosh', 'tanh',
    'log', 'ln', 'lg', 'exp', 'det', 'dim',
    'min', 'max', 'sup', 'inf', 'arg', 'deg', 'gcd',
    'mod', 'bmod', 'pmod', 'ker', 'hom',
}

_STRUCTURES = {
    'frac', 'dfrac', 'tfrac', 'sqrt', 'binom',
    'left', 'right', 'd',
    'text', 'mathrm', 'mathbf', 'mathit', 'mathbb', 'mathcal',
    'operatorname', 'boldsymbol', 'vec', 'hat', 'bar', 'overline',
    'displaystyle',
}

_MISC_SYMBOLS = {
    'hbar', 'ell', 'Re', 'Im', 'aleph', 'emptyset', 'varnothing',
    'triangle', 'star', 'dagger', 'prime',
    'langle', 'rangle', 'lceil', 'rceil', 'lfloor', 'rfloor',
    'quad', 'qquad',
}

MATH_COMMANDS: FrozenSet[str] = frozenset().union(
    _GREEK_LETTERS,
    _OPERATORS,
    _ARROWS,
    _BIG_OPERATORS,
    _FUNCTION_NAMES,
    _STRUCTURES,
    _MISC_SYMBOLS,
)


def build_command_set(extra: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    """Return the default command set, optionally extended.

    Extra names may be given with or without the leading backslash.
    """
    if not extra:
        return MATH_COMMANDS
    names = {name.lstrip('\\') for name in extra if name and name.strip('\\')}
    return MATH_COMMANDS | frozenset(names)
