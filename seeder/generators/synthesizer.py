"""
Field Value Synthesizer

Produces scalar values for plain fields from a closed registry of
type name -> generator function backed by Faker. Names missing from the
registry are an error, never a silent empty value.
"""

import string
from typing import Dict, Callable, Any, Iterable, Optional
import logging
import numpy as np
from faker import Faker

from ..exceptions import UnknownFieldTypeError

logger = logging.getLogger(__name__)

# Pseudo-types resolved by the record generator itself
SEQUENCE_TYPE = "sequence"
SPACE_TYPE = "space"
PSEUDO_TYPES = (SEQUENCE_TYPE, SPACE_TYPE)

TOKEN_ALPHABET = np.array(list(string.ascii_letters + string.digits))

FieldFactory = Callable[[Faker], Any]


DEFAULT_FIELD_TYPES: Dict[str, FieldFactory] = {
    # Person
    'first_name': lambda f: f.first_name(),
    'last_name': lambda f: f.last_name(),
    'name': lambda f: f.name(),
    'prefix': lambda f: f.prefix(),
    'job': lambda f: f.job(),
    'ssn': lambda f: f.ssn(),

    # Internet
    'email': lambda f: f.email(),
    'user_name': lambda f: f.user_name(),
    'password': lambda f: f.password(),
    'url': lambda f: f.url(),
    'domain_name': lambda f: f.domain_name(),
    'ipv4': lambda f: f.ipv4(),
    'ipv6': lambda f: f.ipv6(),
    'port_number': lambda f: f.port_number(),
    'uuid4': lambda f: f.uuid4(),

    # Address
    'address': lambda f: f.address(),
    'street_address': lambda f: f.street_address(),
    'city': lambda f: f.city(),
    'state': lambda f: f.state(),
    'country': lambda f: f.country(),
    'country_code': lambda f: f.country_code(),
    'postcode': lambda f: f.postcode(),
    'latitude': lambda f: float(f.latitude()),
    'longitude': lambda f: float(f.longitude()),
    'phone_number': lambda f: f.phone_number(),

    # Company / commerce
    'company': lambda f: f.company(),
    'catch_phrase': lambda f: f.catch_phrase(),
    'bs': lambda f: f.bs(),
    'color_name': lambda f: f.color_name(),
    'currency_code': lambda f: f.currency_code(),
    'price': lambda f: round(f.pyfloat(left_digits=4, right_digits=2, positive=True), 2),
    'iban': lambda f: f.iban(),
    'credit_card_number': lambda f: f.credit_card_number(),
    'isbn13': lambda f: f.isbn13(),
    'license_plate': lambda f: f.license_plate(),

    # Text
    'word': lambda f: f.word(),
    'sentence': lambda f: f.sentence(),
    'paragraph': lambda f: f.paragraph(),
    'text': lambda f: f.text(max_nb_chars=500),

    # Numbers
    'random_int': lambda f: f.random_int(),
    'random_digit': lambda f: f.random_digit(),
    'pyfloat': lambda f: f.pyfloat(),
    'boolean': lambda f: f.boolean(),

    # Date / time
    'date': lambda f: f.date_object(),
    'date_time': lambda f: f.date_time(),
    'past_datetime': lambda f: f.past_datetime(),
    'future_datetime': lambda f: f.future_datetime(),
    'date_time_this_year': lambda f: f.date_time_this_year(),
    'iso8601': lambda f: f.iso8601(),
    'time': lambda f: f.time(),
}


class FieldSynthesizer:
    """
    Resolves field type names to synthetic values

    Features:
    - Closed registry populated at construction
    - Custom types via register()
    - Short random tokens for fields under uniqueness constraints
    """

    def __init__(
        self,
        faker: Optional[Faker] = None,
        rng: Optional[np.random.Generator] = None,
        field_types: Optional[Dict[str, FieldFactory]] = None
    ):
        """
        Initialize the synthesizer

        Args:
            faker: Faker instance (a fresh one if None)
            rng: numpy generator for tokens (a fresh one if None)
            field_types: Registry to start from (defaults to DEFAULT_FIELD_TYPES)
        """
        self.faker = faker or Faker()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._registry: Dict[str, FieldFactory] = dict(
            DEFAULT_FIELD_TYPES if field_types is None else field_types
        )

    def register(self, type_name: str, func: FieldFactory):
        """Add or replace a field type"""
        if type_name in PSEUDO_TYPES:
            raise ValueError(f"{type_name!r} is reserved")
        self._registry[type_name] = func
        logger.debug(f"Registered field type: {type_name}")

    def has_type(self, type_name: str) -> bool:
        return type_name in PSEUDO_TYPES or type_name in self._registry

    @property
    def type_names(self) -> Iterable[str]:
        return list(self._registry)

    def synthesize(self, type_name: str) -> Any:
        """
        Produce one value for a registered type

        Raises:
            UnknownFieldTypeError: if the type is not registered
        """
        func = self._registry.get(type_name)
        if func is None:
            raise UnknownFieldTypeError(type_name)
        return func(self.faker)

    def unique_token(self, length: int = 6) -> str:
        """Short random alphanumeric token used to spread unique values apart"""
        return "".join(self.rng.choice(TOKEN_ALPHABET, size=length))
