"""
Bundled delivery-zone table.

Checkout cannot price an order without delivery fees, so this static list is
served whenever the backend wilaya table is empty or unreachable.
Fees are in Algerian dinars: (home delivery, pickup point).
"""

from typing import List, Tuple

from ...domain.catalog.models import Wilaya

_WILAYA_FEES: Tuple[Tuple[str, str, int, int], ...] = (
    ("1", "Adrar", 1400, 900),
    ("2", "Chlef", 750, 450),
    ("3", "Laghouat", 950, 600),
    ("4", "Oum El Bouaghi", 800, 450),
    ("5", "Batna", 800, 450),
    ("6", "Béjaïa", 750, 450),
    ("7", "Biskra", 950, 600),
    ("8", "Béchar", 1100, 700),
    ("9", "Blida", 500, 300),
    ("10", "Bouira", 650, 400),
    ("11", "Tamanrasset", 1600, 1050),
    ("12", "Tébessa", 850, 500),
    ("13", "Tlemcen", 850, 500),
    ("14", "Tiaret", 800, 450),
    ("15", "Tizi Ouzou", 650, 400),
    ("16", "Alger", 400, 250),
    ("17", "Djelfa", 900, 550),
    ("18", "Jijel", 800, 450),
    ("19", "Sétif", 750, 450),
    ("20", "Saïda", 850, 500),
    ("21", "Skikda", 800, 450),
    ("22", "Sidi Bel Abbès", 800, 450),
    ("23", "Annaba", 800, 450),
    ("24", "Guelma", 800, 450),
    ("25", "Constantine", 750, 450),
    ("26", "Médéa", 650, 400),
    ("27", "Mostaganem", 800, 450),
    ("28", "M'Sila", 800, 500),
    ("29", "Mascara", 800, 450),
    ("30", "Ouargla", 1000, 650),
    ("31", "Oran", 750, 450),
    ("32", "El Bayadh", 1000, 650),
    ("33", "Illizi", 1600, 1050),
    ("34", "Bordj Bou Arréridj", 750, 450),
    ("35", "Boumerdès", 550, 350),
    ("36", "El Tarf", 850, 500),
    ("37", "Tindouf", 1600, 1050),
    ("38", "Tissemsilt", 800, 450),
    ("39", "El Oued", 1000, 650),
    ("40", "Khenchela", 850, 500),
    ("41", "Souk Ahras", 850, 500),
    ("42", "Tipaza", 550, 350),
    ("43", "Mila", 800, 450),
    ("44", "Aïn Defla", 700, 400),
    ("45", "Naâma", 1000, 650),
    ("46", "Aïn Témouchent", 800, 450),
    ("47", "Ghardaïa", 950, 600),
    ("48", "Relizane", 800, 450),
    ("49", "Timimoun", 1400, 900),
    ("50", "Bordj Badji Mokhtar", 1600, 1050),
    ("51", "Ouled Djellal", 950, 600),
    ("52", "Béni Abbès", 1200, 800),
    ("53", "In Salah", 1500, 1000),
    ("54", "In Guezzam", 1600, 1050),
    ("55", "Touggourt", 1000, 650),
    ("56", "Djanet", 1600, 1050),
    ("57", "El M'Ghair", 1000, 650),
    ("58", "El Meniaa", 1100, 700),
)


def default_wilayas() -> List[Wilaya]:
    """Fresh copy of the bundled wilaya table, ordered by id."""
    return [
        Wilaya(id=wilaya_id, name=name, delivery_home=home, delivery_post=post)
        for wilaya_id, name, home, post in _WILAYA_FEES
    ]
