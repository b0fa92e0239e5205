"""MapReduce applications subpackage; it holds no modules at present."""