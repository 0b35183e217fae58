"""This module contains general utility code that is used throughout
the library.
"""
import warnings

__all__ = ['appendQuery', 'autoSubmitHTML', 'string_to_text']


def autoSubmitHTML(form, title='OpenID transaction in progress'):
    return """
<html>
<head>
  <title>%s</title>
</head>
<body onload="document.forms[0].submit();">
%s
<script>
var elements = document.forms[0].elements;
for (var i = 0; i < elements.length; i++) {
  elements[i].style.display = "none";
}
</script>
</body>
</html>
""" % (title, form)


def appendQuery(url, query):
    """Append an already encoded query string to a HTTP(s) URL. If the
    URL contains a C{?} anywhere, the query is joined with C{&},
    otherwise with C{?}. The existing arguments are preserved.

    @param url: The url to which the query will be appended
    @type url: str, bytes are deprecated

    @param query: The x-www-form-urlencoded query
    @type query: str, bytes are deprecated

    @returns: The URL with the query added
    @rtype: str
    """
    url = string_to_text(url, "Binary values for appendQuery are deprecated. Use text input instead.")
    query = string_to_text(query, "Binary values for appendQuery are deprecated. Use text input instead.")

    if '?' in url:
        sep = '&'
    else:
        sep = '?'

    return '%s%s%s' % (url, sep, query)


def string_to_text(value, deprecate_msg):
    """
    Return input string coverted to text string.

    If input is text, it is returned as is.
    If input is binary, it is decoded using UTF-8 to text.
    """
    assert isinstance(value, (str, bytes))
    if isinstance(value, bytes):
        warnings.warn(deprecate_msg, DeprecationWarning)
        value = value.decode('utf-8')
    return value
