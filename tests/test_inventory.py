"""Stock decrement inside the specification string."""
from storefront.services.inventory import decrement_stock, stock_of

SPECIFICATIONS = "A1,red,10.00,8.00,15|A2,blue,10.00,8.00,3"


def test_decrement_matching_variant():
    assert decrement_stock(SPECIFICATIONS, "red", 2) == "A1,red,10.00,8.00,13|A2,blue,10.00,8.00,3"
    assert decrement_stock(SPECIFICATIONS, "blue", 3) == "A1,red,10.00,8.00,15|A2,blue,10.00,8.00,0"


def test_unknown_variant_leaves_string_untouched():
    assert decrement_stock(SPECIFICATIONS, "green", 1) == SPECIFICATIONS
    assert decrement_stock("", "red", 1) == ""


def test_stock_is_floored_at_zero():
    assert stock_of(decrement_stock(SPECIFICATIONS, "blue", 5), "blue") == 0


def test_malformed_records_are_preserved():
    specifications = "junk|A1,red,1,1,5|B2,red,x,1,9"
    assert decrement_stock(specifications, "red", 1) == "junk|A1,red,1,1,4|B2,red,x,1,9"


def test_variant_is_matched_literally():
    specifications = "A1,x.l,1,1,5|A2,xxl,1,1,5"
    assert decrement_stock(specifications, "x.l", 2) == "A1,x.l,1,1,3|A2,xxl,1,1,5"


def test_extra_trailing_fields_survive():
    assert decrement_stock("A1,red,1,1,5,note", "red", 1) == "A1,red,1,1,4,note"


def test_stock_of():
    assert stock_of(SPECIFICATIONS, "red") == 15
    assert stock_of(SPECIFICATIONS, "green") is None


def test_superscript_stock_is_treated_as_malformed():
    specifications = "A1,red,10.00,8.00,\u00b2|A2,blue,10.00,8.00,3"
    assert decrement_stock(specifications, "red", 1) == specifications
    assert stock_of(specifications, "red") is None
