from note_models import ParsedIngredient, ParsedRecipe
from recipe_format import (
    extract_recipe,
    ingredient_line,
    looks_like_ingredient,
    looks_like_step,
    parse_ingredient,
    scale_recipe,
    scaled_servings,
    serialize_recipe,
)


COOKIES = """Chocolate Chip Cookies
Serves: 24
Prep: 15 minutes
Bake time: 12 min
Ingredients:
2 1/4 cups flour
1 tsp baking soda
½ cup sugar
Instructions:
1. Preheat oven to 375F
2. Mix dry ingredients
Bake until golden
Notes:
Chill dough overnight for thicker cookies"""


def test_whole_plus_fraction_ingredient():
    ingredient = parse_ingredient("1 1/2 cups flour")
    assert ingredient.quantity == 1.5
    assert ingredient.name == "cups flour"
    assert "1" in ingredient.display_quantity
    assert "½" in ingredient.display_quantity


def test_ingredient_without_quantity_keeps_name():
    ingredient = parse_ingredient("- salt to taste")
    assert ingredient.quantity is None
    assert ingredient.display_quantity is None
    assert ingredient.name == "salt to taste"


def test_sections_and_meta():
    recipe = extract_recipe(COOKIES)

    assert recipe.title == "Chocolate Chip Cookies"
    assert recipe.servings == "24"
    assert recipe.prep_time == "15 minutes"
    assert recipe.cook_time == "12 min"
    assert [i.name for i in recipe.ingredients] == ["cups flour", "tsp baking soda", "cup sugar"]
    assert [i.display_quantity for i in recipe.ingredients] == ["2¼", "1", "½"]
    assert recipe.steps == ["Preheat oven to 375F", "Mix dry ingredients", "Bake until golden"]
    assert recipe.notes == "Chill dough overnight for thicker cookies"


def test_serialize_canonical_text():
    assert serialize_recipe(extract_recipe(COOKIES)) == (
        "#recipe#\n"
        "Chocolate Chip Cookies\n"
        "Serves: 24\n"
        "Prep: 15 minutes\n"
        "Cook: 12 min\n"
        "\n"
        "Ingredients:\n"
        "2 1/4 cups flour\n"
        "1 tsp baking soda\n"
        "½ cup sugar\n"
        "\n"
        "Steps:\n"
        "1. Preheat oven to 375F\n"
        "2. Mix dry ingredients\n"
        "3. Bake until golden\n"
        "\n"
        "Notes:\n"
        "Chill dough overnight for thicker cookies"
    )


def test_round_trip_keeps_recipe():
    first = extract_recipe(COOKIES)
    assert extract_recipe(serialize_recipe(first)) == first


def test_ingredients_and_steps_found_without_headers():
    recipe = extract_recipe("Pancakes\nServes 4\n2 eggs\n1 cup milk\nWhisk everything together\nFry in butter")
    assert recipe.title == "Pancakes"
    assert recipe.servings == "4"
    assert [i.original_text for i in recipe.ingredients] == ["2 eggs", "1 cup milk"]
    assert recipe.steps == ["Whisk everything together", "Fry in butter"]


def test_loose_lines_before_ingredients_become_notes():
    recipe = extract_recipe("Soup\nFamily favorite\n2 cups stock\nNotes: freeze leftovers")
    assert recipe.notes == "Family favorite\n\nfreeze leftovers"
    assert extract_recipe(serialize_recipe(recipe)) == recipe


def test_line_heuristics():
    assert looks_like_ingredient("2 cups flour")
    assert looks_like_ingredient("½ tsp salt")
    assert not looks_like_ingredient("1. Preheat the oven")
    assert looks_like_step("1. Preheat the oven")
    assert looks_like_step("Step 3: fold in chips")
    assert looks_like_step("Stir well")
    assert not looks_like_step("Butter, softened")


def test_edited_ingredient_is_rebuilt_from_quantity():
    edited = ParsedIngredient(original_text="2 cups flour", quantity=3.0, display_quantity="3", name="cups flour")
    assert ingredient_line(edited) == "3 cups flour"
    assert ingredient_line(ParsedIngredient(original_text="", name="salt")) == "- salt"


def test_scaling_changes_numbers_not_strings():
    recipe = ParsedRecipe(
        title="Bread",
        servings="4",
        ingredients=[parse_ingredient("2 cups flour"), parse_ingredient("½ tsp salt"), parse_ingredient("water")],
    )
    bigger = scale_recipe(recipe, 1.5)

    assert bigger.servings == "6"
    assert [i.quantity for i in bigger.ingredients] == [3.0, 0.75, None]
    assert [i.display_quantity for i in bigger.ingredients] == ["3", "¾", None]
    assert recipe.ingredients[0].quantity == 2.0

    back = scale_recipe(bigger, 1 / 1.5)
    assert [round(i.quantity, 2) for i in back.ingredients if i.quantity is not None] == [2.0, 0.5]


def test_scaled_servings_keeps_words():
    assert scaled_servings("Serves 4", 0.5) == "Serves 2"
    assert scaled_servings("a crowd", 2) == "a crowd"


def test_empty_recipe():
    assert extract_recipe("") == ParsedRecipe()
    assert serialize_recipe(ParsedRecipe()) == "#recipe#"
