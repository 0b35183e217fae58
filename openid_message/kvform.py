"""Key-value form, the line format of direct OpenID messages.

Each pair is written as C{key:value} followed by a newline. Nothing is
escaped, so a pair can only be represented when the key holds neither a
colon nor a newline and the value holds no newline; L{checkPair} is the
single place that rule lives.
"""
import logging

from .oidutil import string_to_text

__all__ = ['seqToKV', 'kvToSeq', 'checkPair', 'KVFormError']


_LOGGER = logging.getLogger(__name__)


class KVFormError(ValueError):
    pass


def checkPair(key, value):
    """Return the reason why C{key:value} can not be written as a
    key-value form line, or C{None} if it can.

    @type key: str
    @type value: str
    @rtype: Optional[str]
    """
    if not isinstance(key, str):
        return 'key is not text: %r' % (key,)
    if not isinstance(value, str):
        return 'value is not text: %r' % (value,)
    if '\n' in key:
        return 'key contains newline: %r' % (key,)
    if ':' in key:
        return 'key contains colon: %r' % (key,)
    if '\n' in value:
        return 'value contains newline: %r' % (value,)
    return None


class _Complaints(object):
    """Collect lenient-mode warnings, or raise them in strict mode."""

    def __init__(self, operation, data, strict):
        self.operation = operation
        self.data = data
        self.strict = strict

    def __call__(self, msg):
        formatted = '%s warning: %s: %r' % (self.operation, msg, self.data)
        if self.strict:
            raise KVFormError(formatted)
        _LOGGER.debug(formatted)


def seqToKV(seq, strict=False):
    """Represent a sequence of pairs of strings as newline-terminated
    key:value pairs. The pairs are generated in the order given.

    @param seq: The pairs
    @type seq: Iterable[Tuple[str, str]], bytes values are deprecated.

    @param strict: Raise L{KVFormError} on surrounding whitespace
        instead of logging it.

    @raises KVFormError: A pair can not be represented.

    @return: A string representation of the sequence
    @rtype: str
    """
    complain = _Complaints('seqToKV', seq, strict)

    lines = []
    for k, v in seq:
        if isinstance(k, bytes):
            k = string_to_text(k, "Binary values for keys are deprecated. Use text input instead.")
        if isinstance(v, bytes):
            v = string_to_text(v, "Binary values for values are deprecated. Use text input instead.")

        problem = checkPair(k, v)
        if problem is not None:
            raise KVFormError('Invalid input for seqToKV: %s' % (problem,))

        if k.strip() != k:
            complain('Key has whitespace at beginning or end: %r' % (k,))
        if v.strip() != v:
            complain('Value has whitespace at beginning or end: %r' % (v,))

        lines.append(k + ':' + v + '\n')

    return ''.join(lines)


def kvToSeq(data, strict=False):
    """
    Parse newline-terminated key:value pair string into a sequence.

    After one parse, seqToKV and kvToSeq are inverses, with no warnings::

        seq = kvToSeq(s)
        seqToKV(kvToSeq(seq)) == seq

    Blank lines are skipped. Lines without a colon are dropped and
    surrounding whitespace is stripped, with a warning in either case.

    @type data: str, bytes is deprecated

    @rtype: List[Tuple[str, str]]
    """
    complain = _Complaints('kvToSeq', data, strict)

    data = string_to_text(data, "Binary values for data are deprecated. Use text input instead.")

    lines = data.split('\n')
    if lines[-1]:
        complain('Does not end in a newline')
    else:
        del lines[-1]

    pairs = []
    for line_num, line in enumerate(lines, 1):
        if not line.strip():
            continue

        if ':' not in line:
            complain('Line %d does not contain a colon' % line_num)
            continue

        k, v = line.split(':', 1)
        k_s = k.strip()
        if k_s != k:
            complain('In line %d, ignoring leading or trailing whitespace in key %r' % (line_num, k))
        if not k_s:
            complain('In line %d, got empty key' % (line_num,))

        v_s = v.strip()
        if v_s != v:
            complain('In line %d, ignoring leading or trailing whitespace in value %r' % (line_num, v))

        pairs.append((k_s, v_s))

    return pairs
