"""EmailAddress value object shared by orders and wholesale accounts."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from sales.domain import sales

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


@sales.value_object
class EmailAddress:
    """A structurally valid email address.

    Exactly one ``@``, non-empty local and domain parts, a dotted domain, no
    whitespace, no consecutive dots and none of the characters that are only
    legal inside quoted local parts.
    """

    address = String(required=True, max_length=254)

    @invariant.post
    def address_must_be_well_formed(self):
        email = self.address or ""

        def _reject():
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

        if any(ch.isspace() for ch in email) or email.count("@") != 1:
            _reject()

        local_part, domain_part = email.split("@", 1)
        if not local_part or not domain_part:
            _reject()
        if local_part.startswith(".") or local_part.endswith("."):
            _reject()
        if "." not in domain_part or domain_part.startswith(".") or domain_part.endswith("."):
            _reject()
        if ".." in email:
            _reject()
        if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
            _reject()
        if any(ch in email for ch in _FORBIDDEN):
            _reject()

    def __str__(self):
        return self.address
