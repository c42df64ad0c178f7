import dataclasses
import random
import uuid

import faker as fakerlib


@dataclasses.dataclass
class Config:
    locale: str
    faker: fakerlib.Faker
    seed: int | None = None


global_config = Config(
    locale="en",
    faker=fakerlib.Faker("en"),
)


def configure(
    *,
    locale: str | None = None,
    faker: fakerlib.Faker | None = None,
    seed: int | None = None,
) -> None:
    """Set process defaults. Factories built afterwards pick them up; built ones keep theirs."""
    if seed is None:
        seed = int(uuid.uuid4())
    random.seed(seed)
    global_config.seed = seed

    if locale is not None:
        global_config.locale = locale
        global_config.faker = fakerlib.Faker(locale)

    if faker is not None:
        global_config.faker = faker

    global_config.faker.seed_instance(seed)
