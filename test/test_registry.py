"""
Test type registry.
"""

from pytest import raises

from hatchet.registry import TYPE_REGISTRY, TypeRegistry, register_type


class Animal:
    pass


class Dog(Animal):
    pass


class Cat(Animal):
    pass


def test_register():
    """
    Test registration and resolution by name.
    """
    registry = TypeRegistry(Dog)
    registry.register(Cat, "Kitty")

    assert registry.resolve("Dog") is Dog
    assert registry.resolve("Kitty") is Cat
    assert registry.resolve("Cat") is None

    assert "Dog" in registry
    assert len(registry) == 2
    assert list(registry) == ["Dog", "Kitty"]

    assert registry.name_of(Dog) == "Dog"
    assert registry.name_of(Cat) == "Kitty"

    # unregistered types are named by class name
    assert registry.name_of(Animal) == "Animal"


def test_alias():
    """
    Test registering a type under multiple names.
    """
    registry = TypeRegistry()
    registry.register(Dog)
    registry.register(Dog, "Hound")

    assert registry.resolve("Hound") is Dog

    # first registered name is used for emission
    assert registry.name_of(Dog) == "Dog"

    # re-registering same type under same name is a no-op
    registry.register(Dog)
    assert len(registry) == 2


def test_conflict():
    """
    Test registering a different type under an existing name.
    """
    registry = TypeRegistry(Dog)

    with raises(ValueError):
        registry.register(Cat, "Dog")


def test_decorator():
    """
    Test class decorator, with an explicit and the process-wide registry.
    """
    registry = TypeRegistry()

    @register_type("Parrot", registry=registry)
    class Bird(Animal):
        pass

    assert registry.resolve("Parrot") is Bird
    assert "Parrot" not in TYPE_REGISTRY

    @register_type()
    class RegistryTestFish(Animal):
        pass

    assert TYPE_REGISTRY.resolve("RegistryTestFish") is RegistryTestFish
