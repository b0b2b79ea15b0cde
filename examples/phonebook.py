from __future__ import annotations

import datetime

import beanbind


class PhoneNumber:
    name: str
    number: str

    def __init__(self, name: str, number: str) -> None:
        self.name = name
        self.number = number


class EmergencyNumber(PhoneNumber):
    pass


class Contact:
    numbers: list[PhoneNumber]
    added: datetime.date

    @beanbind.constructor('name')
    def __init__(self, name: str) -> None:
        self._name = name
        self.numbers = []
        self.added = datetime.date.today()

    @property
    def name(self) -> str:
        return self._name


def main() -> None:
    mapper = beanbind.Mapper(aliases={EmergencyNumber: 'emergency'})

    contact = Contact('Tom Test')
    contact.numbers.append(PhoneNumber('Mobile', '123'))
    contact.numbers.append(EmergencyNumber('Emergency', '911'))

    data = mapper.encode(contact)
    print(data.decode())

    restored = mapper.decode(data, Contact)
    print(restored.name, [type(n).__name__ for n in restored.numbers])


if __name__ == '__main__':
    main()
