"""MapReduce subpackage; it holds no modules at present."""