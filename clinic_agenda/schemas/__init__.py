# Schemas package (re-export feature modules for stable imports)
from .agenda.agenda import *
from .agenda.seed import *
