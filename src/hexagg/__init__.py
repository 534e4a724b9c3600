from hexagg import aggregate, ascii_grid, convert, exceptions, hexmap, tessellate
from hexagg.convert import ascii_grid_to_hex, convert_files
