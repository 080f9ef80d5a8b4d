# ABOUTME: Pure inventory, gold and equip-slot mutations over Character models.
# ABOUTME: Every function returns a new Character and preserves the quantity and gold invariants.

import time

from src.models.character import Character, EquipSlot, InventoryItem
from src.models.equipment import Equipment, EquipmentType

SLOT_BY_TYPE = {
    EquipmentType.ARMA: EquipSlot.ARMA,
    EquipmentType.ARMADURA: EquipSlot.ARMADURA,
    EquipmentType.ESCUDO: EquipSlot.ESCUDO,
    EquipmentType.AMULETO: EquipSlot.ACESSORIO,
    EquipmentType.ANEL: EquipSlot.ACESSORIO,
}


class InventoryError(ValueError):
    """Raised when an inventory mutation would break an invariant"""
    pass


def add_item(character: Character, equipment: Equipment, quantity: int = 1) -> Character:
    """
    Add units of an equipment to a character's inventory.

    Stackable equipment increments an existing slot; anything else gets a new slot.

    Args:
        character: Recipient
        equipment: Equipment definition
        quantity: Units to add (>= 1)

    Returns:
        Updated character
    """
    if quantity < 1:
        raise InventoryError(f"Quantity must be at least 1, got {quantity}")

    inventory = list(character.inventory)
    if equipment.stackable:
        for idx, slot in enumerate(inventory):
            if slot.equipment_id == equipment.id:
                inventory[idx] = slot.model_copy(update={"quantity": slot.quantity + quantity})
                return character.model_copy(update={"inventory": inventory})

    inventory.append(
        InventoryItem(
            id=f"inv-{equipment.id}-{time.time_ns()}",
            equipment_id=equipment.id,
            quantity=quantity,
        )
    )
    return character.model_copy(update={"inventory": inventory})


def consume_item(character: Character, equipment_id: str, quantity: int = 1) -> Character:
    """
    Remove units of an equipment, dropping slots that reach zero.

    Raises:
        InventoryError: If the character holds fewer units than requested
    """
    if character.quantity_of(equipment_id) < quantity:
        raise InventoryError(
            f"{character.name} holds fewer than {quantity} of {equipment_id}"
        )

    remaining = quantity
    inventory: list[InventoryItem] = []
    for slot in character.inventory:
        if remaining and slot.equipment_id == equipment_id:
            taken = min(slot.quantity, remaining)
            remaining -= taken
            if slot.quantity - taken > 0:
                inventory.append(slot.model_copy(update={"quantity": slot.quantity - taken}))
            continue
        inventory.append(slot)

    equipped = dict(character.equipped_items)
    if not any(slot.equipment_id == equipment_id for slot in inventory):
        equipped = {
            slot: (None if eq_id == equipment_id else eq_id) for slot, eq_id in equipped.items()
        }
    return character.model_copy(update={"inventory": inventory, "equipped_items": equipped})


def apply_gold(character: Character, amount: int) -> tuple[Character, int]:
    """
    Apply a gold delta, clamping the balance at zero.

    Returns:
        Tuple of (updated character, delta actually applied)
    """
    gold = max(0, character.gold + amount)
    return character.model_copy(update={"gold": gold}), gold - character.gold


def slot_for(equipment: Equipment) -> EquipSlot | None:
    """Equip slot matching the equipment type, or None when it cannot be equipped"""
    if not equipment.equippable:
        return None
    return SLOT_BY_TYPE.get(equipment.type)


def equip(character: Character, equipment: Equipment) -> Character:
    """
    Place an owned equippable item in its slot, replacing whatever was there.

    Raises:
        InventoryError: If the item is not owned or cannot be equipped
    """
    if character.quantity_of(equipment.id) < 1:
        raise InventoryError(f"{character.name} does not own {equipment.name}")
    slot = slot_for(equipment)
    if slot is None:
        raise InventoryError(f"{equipment.name} cannot be equipped")

    equipped = dict(character.equipped_items)
    equipped[slot] = equipment.id
    return character.model_copy(update={"equipped_items": equipped})


def unequip(character: Character, slot: EquipSlot) -> Character:
    """Clear an equip slot"""
    equipped = dict(character.equipped_items)
    equipped[slot] = None
    return character.model_copy(update={"equipped_items": equipped})
