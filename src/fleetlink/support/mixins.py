def quote(val):
    return "'" + str(val) + "'" if val is not None else "None"


class StringerMixin:
    """
    Renders the class name and the instance attributes in key sorted order.
    Protected attributes (with a leading underscore) are left out.
    """

    def __str__(self):
        return type(self).__name__ + self._sorted_items_string()

    __repr__ = __str__

    def _sorted_items_string(self):
        return "{" + ", ".join([str(key) + ": " + quote(val)
                                for key, val in sorted(self.__dict__.items())
                                if not key.startswith('_')]) + "}"


class CommonEqualityMixin(object):
    """  a value equality comparison for value objects. Instances are equal when they have
         exactly the same type and the same attributes. """

    def __eq__(self, other):
        return type(other) is type(self) and self.__dict__ == other.__dict__

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = None
